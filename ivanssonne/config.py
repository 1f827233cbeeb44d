import os
from typing import Mapping, NamedTuple, Optional


class Settings(NamedTuple):
    host: str = "0.0.0.0"
    port: int = 7860
    log_level: str = "INFO"
    telemetry_dir: Optional[str] = None
    meeples: int = 8
    seed: Optional[int] = None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Reads the server settings from environment variables."""
    env = os.environ if environ is None else environ
    seed = env.get("IVANSSONNE_SEED")
    return Settings(
        host=env.get("HOST", "0.0.0.0"),
        port=int(env.get("PORT", 7860)),
        log_level=env.get("IVANSSONNE_LOG_LEVEL", "INFO").upper(),
        telemetry_dir=env.get("IVANSSONNE_TELEMETRY_DIR") or None,
        meeples=int(env.get("IVANSSONNE_MEEPLES", 8)),
        seed=int(seed) if seed not in (None, "") else None,
    )
