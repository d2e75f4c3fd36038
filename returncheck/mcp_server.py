"""MCP server exposing the return value checks as tools."""

from __future__ import annotations

import argparse
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from .service import CheckService


def create_server(service: CheckService) -> FastMCP:
    mcp = FastMCP(
        name="Return Value Checks",
        instructions=(
            "Check a Python source tree for ignored return values of functions that "
            "must be checked. Use check() for diagnostics, search() to find functions "
            "and explain() to see which scope decided a function's verdict."
        ),
        json_response=True,
    )

    @mcp.tool()
    def list_checks() -> dict:
        """Return the names of the available checks."""
        return service.list_checks()

    @mcp.tool()
    def check(
        custom_annotations: list[str] | None = None,
        exclude_annotations: list[str] | None = None,
        checks: list[str] | None = None,
        max_files: int | None = None,
    ) -> dict:
        """Run the checks over the source root and return the diagnostics."""
        return service.check(
            custom_annotations=custom_annotations,
            exclude_annotations=exclude_annotations,
            checks=checks,
            max_files=max_files,
        )

    @mcp.tool()
    def search(query: str, limit: int = 20) -> dict:
        """Find functions by partial fully-qualified name."""
        return service.search(query, limit=limit)

    @mcp.tool()
    def explain(
        symbol: str,
        custom_annotations: list[str] | None = None,
        exclude_annotations: list[str] | None = None,
        checks: list[str] | None = None,
    ) -> dict:
        """Return the verdict for a function by fully-qualified name, per check."""
        return service.explain(
            symbol,
            custom_annotations=custom_annotations,
            exclude_annotations=exclude_annotations,
            checks=checks,
        )

    @mcp.tool()
    def refresh() -> dict:
        """Re-read the source root after files changed."""
        return service.refresh()

    return mcp


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run MCP server for return value checks")
    parser.add_argument("--root", default=".", help="Root directory of the codebase")
    parser.add_argument(
        "--transport",
        default="stdio",
        choices=["stdio", "sse", "streamable-http"],
        help="Transport type",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Host for HTTP transports")
    parser.add_argument("--port", type=int, default=8001, help="Port for HTTP transports")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    root = Path(args.root)
    if not root.is_dir():
        raise SystemExit(f"Root not found: {root}")

    mcp = create_server(CheckService(root))
    mcp.settings.host = args.host
    mcp.settings.port = args.port
    mcp.run(transport=args.transport)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
