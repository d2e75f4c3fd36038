from __future__ import annotations

import argparse
import sys

import anyio
from mcp.client.session import ClientSession
from mcp.client.stdio import StdioServerParameters, stdio_client


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="MCP stdio smoke test")
    parser.add_argument("--root", default=".", help="Source root to check")
    return parser.parse_args()


async def run() -> None:
    args = parse_args()
    params = StdioServerParameters(
        command=sys.executable,
        args=["-m", "returncheck.mcp_server", "--root", args.root, "--transport", "stdio"],
    )

    async with stdio_client(params) as (read_stream, write_stream):
        async with ClientSession(read_stream, write_stream) as session:
            await session.initialize()
            tools = await session.list_tools()
            result = await session.call_tool("check")

    payload = result.structuredContent
    if payload is None and result.content:
        payload = [item.model_dump() for item in result.content]

    print({
        "tools": [tool.name for tool in tools.tools],
        "check": payload,
    })


if __name__ == "__main__":
    anyio.run(run)
