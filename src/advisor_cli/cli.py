"""Command-line client that invokes one tool through a fresh worker."""

from __future__ import annotations

import argparse
import asyncio
import json

from advisor_server.settings import get_settings
from advisor_server.tool_broker import ToolBroker
from advisor_tools.protocol import ToolResponse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Call a financial advisor tool")
    parser.add_argument("tool", nargs="?", help="Tool name, e.g. get_market_data")
    parser.add_argument("--args", default="{}", help="Tool arguments as a JSON object")
    parser.add_argument("--list", action="store_true", help="List the tool catalog instead")
    parser.add_argument("--timeout", type=float, default=None, help="Call timeout seconds")
    return parser


async def run(args: argparse.Namespace) -> ToolResponse:
    broker = ToolBroker(get_settings())
    if args.list:
        return await broker.list_tools(timeout_s=args.timeout)
    return await broker.call_tool(args.tool, json.loads(args.args), timeout_s=args.timeout)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.list and not args.tool:
        parser.error("a tool name is required unless --list is given")
    try:
        arguments = json.loads(args.args)
    except json.JSONDecodeError as exc:
        parser.error(f"--args is not valid JSON: {exc}")
    if not isinstance(arguments, dict):
        parser.error("--args must be a JSON object")

    response = asyncio.run(run(args))
    print(json.dumps(response.model_dump(mode="json"), ensure_ascii=False, indent=2))
    return 0 if response.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
