"""Core views of mailbox items and folders."""

from .item_summary import FolderInfo, ItemSummary
from .item_types import ITEM_TYPES, ItemTypeInfo, get_item_type_info, item_type_for_extension

__all__ = [
    "FolderInfo",
    "ItemSummary",
    "ITEM_TYPES",
    "ItemTypeInfo",
    "get_item_type_info",
    "item_type_for_extension",
]
