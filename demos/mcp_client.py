import asyncio
import json
import os
import sys


async def run_client():
    # Start the server process
    env = os.environ.copy()
    env["PYTHONPATH"] = os.getcwd()

    process = await asyncio.create_subprocess_exec(
        sys.executable, "-m", "ivanssonne.mcp.server",
        stdin=asyncio.subprocess.PIPE,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        env=env
    )

    async def send(message):
        process.stdin.write(json.dumps(message).encode() + b"\n")
        await process.stdin.drain()

    async def call(req_id, name, arguments=None):
        await send({
            "jsonrpc": "2.0",
            "id": req_id,
            "method": "tools/call",
            "params": {"name": name, "arguments": arguments or {}}
        })
        response = json.loads(await process.stdout.readline())
        return response["result"]["content"][0]["text"]

    # 1. Initialize
    await send({
        "jsonrpc": "2.0",
        "id": 1,
        "method": "initialize",
        "params": {
            "protocolVersion": "2024-11-05",
            "capabilities": {},
            "clientInfo": {"name": "demo-client", "version": "1.0.0"}
        }
    })
    line = await process.stdout.readline()
    print(f"Init Response: {line.decode().strip()}")
    await send({"jsonrpc": "2.0", "method": "notifications/initialized"})

    # 2. New game with a fixed draw order
    print(await call(2, "reset_game", {"seed": 1}))

    # 3. Place the first piece where the engine allows it
    placements = json.loads(await call(3, "get_legal_placements"))
    x, y = placements["placements"][0]
    print(f"Holding {placements['piece']['letter']}: {await call(4, 'place_piece', {'x': x, 'y': y})}")
    print(await call(5, "end_turn"))

    # 4. Final state
    print(await call(6, "get_board_state"))

    process.terminate()
    await process.wait()

if __name__ == "__main__":
    asyncio.run(run_client())
