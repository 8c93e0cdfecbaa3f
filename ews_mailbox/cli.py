"""
Command-line entry point.

Usage:
    ews-mailbox list-folders --recurse
    ews-mailbox search-items --item-type Mail --subject invoice --result-size Unlimited
    ews-mailbox export-items --folder Inbox/Archive --path ./export
    ews-mailbox import-items --path ./export --folder Inbox/Restored
    ews-mailbox delete-items --address spam@example.com --delete-mode HardDelete
    ews-mailbox --target-mailbox jdoe create-folder --name Projects
    ews-mailbox delete-folder --folder "Inbox/Old Projects"

Connection settings come from the environment (.env): EWS_EMAIL,
EWS_PASSWORD, EWS_SERVER_URL... Connection options given on the command
line override them.
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

from . import __version__
from . import ews_client as session
from .middleware.logging import configure_audit_logger, setup_logging
from .tools import get_tools

CONNECT_TOOL = "connect_mailbox"
DISCONNECT_TOOL = "disconnect_mailbox"


def _option_name(prop: str) -> str:
    return "--" + prop.replace("_", "-")


def add_schema_arguments(parser: argparse.ArgumentParser, schema: Dict[str, Any]) -> None:
    """Add one option per property of a tool's input schema."""
    input_schema = schema.get("inputSchema", {})
    required = set(input_schema.get("required", []))

    for prop, spec in input_schema.get("properties", {}).items():
        kwargs = {"dest": prop, "default": None, "help": spec.get("description")}
        if spec.get("type") == "boolean":
            kwargs["action"] = argparse.BooleanOptionalAction
        else:
            if "enum" in spec:
                kwargs["choices"] = spec["enum"]
            kwargs["required"] = prop in required
        parser.add_argument(_option_name(prop), **kwargs)


def build_parser(tools: Dict[str, Any]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ews-mailbox",
        description="Search, export, import and delete Exchange mailbox items over EWS",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", default="INFO", help="Console/file log level")
    parser.add_argument("--log-dir", default="logs", help="Directory for rotating log files ('' disables)")

    connection = parser.add_argument_group("connection")
    add_schema_arguments(connection, tools[CONNECT_TOOL].get_schema())

    subparsers = parser.add_subparsers(dest="command", required=True)
    for name, tool in tools.items():
        if name == DISCONNECT_TOOL:
            continue
        schema = tool.get_schema()
        sub = subparsers.add_parser(name.replace("_", "-"), help=schema["description"])
        sub.set_defaults(tool_name=name)
        if name != CONNECT_TOOL:
            add_schema_arguments(sub, schema)
    return parser


def _split_arguments(args: argparse.Namespace, tools: Dict[str, Any]) -> tuple:
    connect_props = tools[CONNECT_TOOL].get_schema()["inputSchema"]["properties"]
    values = {k: v for k, v in vars(args).items() if v is not None}

    connect_args = {k: values[k] for k in connect_props if k in values}
    tool_args = {}
    if args.tool_name != CONNECT_TOOL:
        tool_props = tools[args.tool_name].get_schema()["inputSchema"]["properties"]
        tool_args = {k: values[k] for k in tool_props if k in values}
    return connect_args, tool_args


async def run_command(tools: Dict[str, Any], tool_name: str,
                      connect_args: Dict[str, Any], tool_args: Dict[str, Any]) -> Dict[str, Any]:
    """Connect, run one tool and disconnect."""
    result = await tools[CONNECT_TOOL].safe_execute(**connect_args)
    if not result.get("success"):
        return result
    try:
        if tool_name == CONNECT_TOOL:
            return result
        return await tools[tool_name].safe_execute(**tool_args)
    finally:
        session.disconnect()


def main(argv: Optional[List[str]] = None) -> int:
    tools = get_tools()
    parser = build_parser(tools)
    args = parser.parse_args(argv)

    setup_logging(args.log_level, args.log_dir or None)
    configure_audit_logger(args.log_dir or None)

    connect_args, tool_args = _split_arguments(args, tools)
    result = asyncio.run(run_command(tools, args.tool_name, connect_args, tool_args))

    json.dump(result, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")
    return 0 if result.get("success") else 1


if __name__ == "__main__":
    sys.exit(main())
