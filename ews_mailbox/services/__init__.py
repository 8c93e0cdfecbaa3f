"""Service layer: folder, search and export/import operations."""

from .folder_service import FolderService
from .search_service import SearchService, build_item_filters, combine_filters, paginate
from .export_service import ExportService

__all__ = [
    "FolderService",
    "SearchService",
    "ExportService",
    "build_item_filters",
    "combine_filters",
    "paginate",
]
