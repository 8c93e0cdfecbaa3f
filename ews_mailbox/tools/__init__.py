"""Mailbox command tools."""

from typing import Dict

from .base import BaseTool
from .connection_tools import ConnectMailboxTool, DisconnectMailboxTool
from .folder_tools import CreateFolderTool, DeleteFolderTool, ListFoldersTool
from .item_tools import DeleteItemsTool, ExportItemsTool, ImportItemsTool, SearchItemsTool

TOOL_CLASSES = [
    ConnectMailboxTool,
    DisconnectMailboxTool,
    SearchItemsTool,
    DeleteItemsTool,
    ExportItemsTool,
    ImportItemsTool,
    ListFoldersTool,
    CreateFolderTool,
    DeleteFolderTool,
]


def get_tools(ews_client=None) -> Dict[str, BaseTool]:
    """Instantiate every tool, keyed by tool name."""
    tools = {}
    for tool_cls in TOOL_CLASSES:
        tool = tool_cls(ews_client)
        tools[tool.name] = tool
    return tools


__all__ = [
    "BaseTool",
    "ConnectMailboxTool",
    "DisconnectMailboxTool",
    "SearchItemsTool",
    "DeleteItemsTool",
    "ExportItemsTool",
    "ImportItemsTool",
    "ListFoldersTool",
    "CreateFolderTool",
    "DeleteFolderTool",
    "get_tools",
]
