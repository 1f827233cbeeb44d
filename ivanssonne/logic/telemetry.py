import json
import os
from datetime import datetime
from typing import Any, Dict, List, Optional


class TelemetryManager:
    """
    Writes every action applied to a game, and the final result, as JSON
    lines so that finished games can be replayed and analysed later.

    Nothing is written when no log directory is configured.
    """
    def __init__(self, log_dir: Optional[str] = None):
        self.log_dir = log_dir
        self.session_id = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.current_game_history: List[Dict[str, Any]] = []

    @property
    def enabled(self) -> bool:
        return bool(self.log_dir)

    @property
    def game_log_path(self) -> Optional[str]:
        if not self.enabled:
            return None
        return os.path.join(self.log_dir, f"game_{self.session_id}.jsonl")

    def _append(self, path: str, record: Dict[str, Any]):
        os.makedirs(self.log_dir, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False) + "\n")

    def log_turn(self, turn_data: Dict[str, Any]):
        """Logs a single applied (or rejected) action."""
        turn_data["timestamp"] = datetime.now().isoformat()
        self.current_game_history.append(turn_data)
        if self.enabled:
            self._append(self.game_log_path, turn_data)

    def finalize_game(self, final_scores: Dict[str, Any], winners: List[str]):
        """Saves the final result and summary of the game."""
        summary = {
            "session_id": self.session_id,
            "final_scores": final_scores,
            "winners": winners,
            "total_actions": len(self.current_game_history),
            "timestamp": datetime.now().isoformat()
        }
        if self.enabled:
            self._append(os.path.join(self.log_dir, "summary_stats.jsonl"), summary)
        return summary
