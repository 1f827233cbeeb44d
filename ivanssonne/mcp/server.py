import asyncio
import logging
import sys

from mcp.server.models import InitializationOptions
from mcp.server import NotificationOptions, Server
from mcp.server.stdio import stdio_server
from mcp.server.sse import SseServerTransport
from starlette.applications import Starlette
from starlette.routing import Mount, Route
from starlette.responses import JSONResponse, Response
import mcp.types as types

from ivanssonne import __version__
from ivanssonne.config import load_settings
from ivanssonne.mcp.session import GameSession

settings = load_settings()
session = GameSession(settings)

server = Server("ivanssonne-engine")

_NO_ARGUMENTS = {"type": "object", "properties": {}}


@server.list_tools()
async def handle_list_tools() -> list[types.Tool]:
    """List available tools."""
    return [
        types.Tool(
            name="reset_game",
            description="Starts a new game. The draw order is a permutation of the tile catalogue fixed by `seed`.",
            inputSchema={
                "type": "object",
                "properties": {
                    "players": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {"name": {"type": "string"}, "color": {"type": "string"}},
                            "required": ["name"],
                        },
                    },
                    "seed": {"type": "integer"},
                },
            },
        ),
        types.Tool(
            name="get_board_state",
            description="Returns an ASCII map of the board; '+' marks where the held piece fits.",
            inputSchema=_NO_ARGUMENTS,
        ),
        types.Tool(
            name="get_game_state",
            description="Returns players, scores, meeples, the held piece and the placed pieces as JSON.",
            inputSchema=_NO_ARGUMENTS,
        ),
        types.Tool(
            name="get_legal_placements",
            description="Returns the held piece and every coordinate where it can be placed as rotated.",
            inputSchema=_NO_ARGUMENTS,
        ),
        types.Tool(
            name="rotate_piece",
            description="Turns the held piece a quarter turn left or right.",
            inputSchema={
                "type": "object",
                "properties": {"direction": {"type": "string", "enum": ["left", "right"]}},
                "required": ["direction"],
            },
        ),
        types.Tool(
            name="place_piece",
            description="Places the held piece on the board.",
            inputSchema={
                "type": "object",
                "properties": {
                    "x": {"oneOf": [{"type": "integer"}, {"type": "string"}]},
                    "y": {"oneOf": [{"type": "integer"}, {"type": "string"}]},
                },
                "required": ["x", "y"],
            },
        ),
        types.Tool(
            name="place_meeple",
            description="Places a meeple on the piece placed this turn. The address is [side] for a road "
                        "or town and [side, half] for a field (sides: 1 bottom, 2 left, 3 top, 4 right).",
            inputSchema={
                "type": "object",
                "properties": {
                    "address": {"type": "array", "items": {"type": "integer"}, "minItems": 1, "maxItems": 2},
                },
                "required": ["address"],
            },
        ),
        types.Tool(
            name="end_turn",
            description="Scores features closed this turn, returns their meeples and hands the next piece out.",
            inputSchema=_NO_ARGUMENTS,
        ),
        types.Tool(
            name="get_new_piece",
            description="Discards a held piece that fits nowhere and draws another one.",
            inputSchema=_NO_ARGUMENTS,
        ),
        types.Tool(
            name="end_game",
            description="Ends the game and returns the final scores and winners, keyed by player id.",
            inputSchema=_NO_ARGUMENTS,
        ),
    ]


@server.call_tool()
async def handle_call_tool(
    name: str, arguments: dict | None
) -> list[types.TextContent | types.ImageContent | types.EmbeddedResource]:
    """Handle tool calls."""
    text = session.call_tool(name, arguments)
    return [types.TextContent(type="text", text=text)]


def _initialization_options() -> InitializationOptions:
    return InitializationOptions(
        server_name="ivanssonne",
        server_version=__version__,
        capabilities=server.get_capabilities(
            notification_options=NotificationOptions(),
            experimental_capabilities={},
        ),
    )


async def main_stdio():
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, _initialization_options())

# --- SSE / Web Server Implementation ---
sse = SseServerTransport("/messages/")


async def handle_sse(request):
    async with sse.connect_sse(request.scope, request.receive, request._send) as (
        read_stream,
        write_stream,
    ):
        await server.run(read_stream, write_stream, _initialization_options())
    return Response()


async def handle_root(request):
    return JSONResponse({"status": "running", "mcp_endpoint": "/sse"})


starlette_app = Starlette(
    routes=[
        Route("/", endpoint=handle_root),
        Route("/sse", endpoint=handle_sse, methods=["GET"]),
        Mount("/messages/", app=sse.handle_post_message),
    ],
)


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    # stdout carries the stdio transport, so logs go to stderr.
    logging.basicConfig(stream=sys.stderr, level=settings.log_level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if argv and argv[0] == "--sse":
        import uvicorn
        uvicorn.run(starlette_app, host=settings.host, port=settings.port)
    else:
        asyncio.run(main_stdio())


if __name__ == "__main__":
    main()
