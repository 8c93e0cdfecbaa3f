"""Item tools: search, delete, export and import mailbox items."""

from typing import Any, Dict

from ..core.item_summary import ItemSummary
from ..core.item_types import get_item_type_info
from ..exceptions import EWSMailboxError, ToolExecutionError
from ..middleware.logging import get_audit_logger
from ..models import (
    DeleteItemsRequest,
    ExportItemsRequest,
    ImportItemsRequest,
    ItemSearchRequest,
    ItemType,
)
from ..services.export_service import ExportService
from ..services.folder_service import FolderService
from ..services.search_service import SearchService
from ..utils import format_success_response, safe_get
from .base import BaseTool

SEARCH_PROPERTIES = {
    "item_type": {
        "type": "string",
        "enum": [t.value for t in ItemType],
        "description": "Item type to search",
        "default": "Mail"
    },
    "folder": {
        "type": "string",
        "description": "Folder name or path (e.g. Inbox/Projects); defaults to the item type's folder"
    },
    "subject": {
        "type": "string",
        "description": "Subject substring (display name for contacts)"
    },
    "address": {
        "type": "string",
        "description": "Sender (mail) or organizer (calendar) address substring"
    },
    "start_date": {
        "type": "string",
        "description": "Inclusive start of the date range (ISO 8601)"
    },
    "end_date": {
        "type": "string",
        "description": "Exclusive end of the date range (ISO 8601)"
    },
    "result_size": {
        "type": ["integer", "string"],
        "description": "Maximum number of items, or 'Unlimited'",
        "default": 1000
    }
}


class ItemTool(BaseTool):
    """Shared plumbing for tools that start with an item search."""

    def search_service(self) -> SearchService:
        return SearchService(self.get_account(), page_size=self.ews_client.config.page_size)

    def run_search(self, request: ItemSearchRequest, only_fields=None):
        try:
            return self.search_service().search(request, only_fields=only_fields)
        except EWSMailboxError:
            raise
        except Exception as e:
            self.logger.error(f"Search failed: {e}")
            raise ToolExecutionError(f"Failed to search {request.item_type.value} items: {e}")


class SearchItemsTool(ItemTool):
    """Tool for searching mailbox items."""

    def get_schema(self) -> Dict[str, Any]:
        return {
            "name": "search_items",
            "description": "Search mail, calendar, contact or task items in a mailbox folder",
            "inputSchema": {
                "type": "object",
                "properties": dict(SEARCH_PROPERTIES)
            }
        }

    async def execute(self, **kwargs) -> Dict[str, Any]:
        """Search items."""
        request = self.validate_input(ItemSearchRequest, **kwargs)
        info = get_item_type_info(request.item_type)

        folder, items = self.run_search(request)
        summaries = [ItemSummary.from_ews_item(item, info).model_dump() for item in items]

        return format_success_response(
            f"Found {len(summaries)} {request.item_type.value} item(s)",
            items=summaries,
            total_count=len(summaries),
            folder=safe_get(folder, "name", request.folder),
            mailbox=self.get_mailbox_info()
        )


class DeleteItemsTool(ItemTool):
    """Tool for deleting the items a search matches."""

    def get_schema(self) -> Dict[str, Any]:
        properties = dict(SEARCH_PROPERTIES)
        properties["delete_mode"] = {
            "type": "string",
            "enum": ["HardDelete", "SoftDelete", "MoveToDeletedItems"],
            "description": "How to delete the items",
            "default": "MoveToDeletedItems"
        }
        return {
            "name": "delete_items",
            "description": "Delete the items matching a search",
            "inputSchema": {
                "type": "object",
                "properties": properties
            }
        }

    async def execute(self, **kwargs) -> Dict[str, Any]:
        """Search, then delete every match."""
        request = self.validate_input(DeleteItemsRequest, **kwargs)
        mailbox = self.get_mailbox_info()
        audit = get_audit_logger()

        info = get_item_type_info(request.item_type)
        folder, items = self.run_search(request, only_fields=[info.subject_field])
        if not items:
            return format_success_response("No items matched", deleted_count=0, mailbox=mailbox)

        # One DeleteItem call per batch; the first batch with a failure stops the command
        batch_size = self.ews_client.config.page_size
        deleted = 0
        for offset in range(0, len(items), batch_size):
            batch = items[offset:offset + batch_size]
            try:
                results = self.get_account().bulk_delete(
                    ids=batch,
                    delete_type=request.delete_mode.value
                )
            except Exception as e:
                audit.log_operation("delete_items", mailbox, False, {"deleted": deleted, "error": str(e)})
                raise ToolExecutionError(f"Failed to delete items after {deleted} deleted: {e}")

            failures = [r for r in results if isinstance(r, Exception)]
            deleted += len(results) - len(failures)
            if failures:
                audit.log_operation("delete_items", mailbox, False, {
                    "deleted": deleted, "failed": len(failures), "error": str(failures[0])
                })
                raise ToolExecutionError(
                    f"Failed to delete {len(failures)} of {len(results)} item(s) in batch "
                    f"({deleted} deleted, {len(items) - offset - len(batch)} not attempted): {failures[0]}"
                )

        audit.log_operation("delete_items", mailbox, True, {
            "deleted": deleted,
            "delete_mode": request.delete_mode.value,
            "folder": safe_get(folder, "name", request.folder)
        })
        self.logger.info(f"Deleted {deleted} item(s) ({request.delete_mode.value})")

        return format_success_response(
            f"Deleted {deleted} item(s)",
            deleted_count=deleted,
            delete_mode=request.delete_mode.value,
            mailbox=mailbox
        )


class ExportItemsTool(ItemTool):
    """Tool for exporting the items a search matches to files."""

    def get_schema(self) -> Dict[str, Any]:
        properties = dict(SEARCH_PROPERTIES)
        properties["path"] = {
            "type": "string",
            "description": "Directory to write .eml/.ics/.vcf files to"
        }
        return {
            "name": "export_items",
            "description": "Export matching items as MIME (.eml), iCalendar (.ics) or vCard (.vcf) files",
            "inputSchema": {
                "type": "object",
                "properties": properties,
                "required": ["path"]
            }
        }

    async def execute(self, **kwargs) -> Dict[str, Any]:
        """Search, then write each match to the export directory."""
        request = self.validate_input(ExportItemsRequest, **kwargs)
        info = get_item_type_info(request.item_type)

        folder, items = self.run_search(request, only_fields=["mime_content", info.subject_field])
        files = ExportService(self.get_account()).export_items(items, request.item_type, request.path)

        return format_success_response(
            f"Exported {len(files)} item(s)",
            files=files,
            exported_count=len(files),
            folder=safe_get(folder, "name", request.folder),
            mailbox=self.get_mailbox_info()
        )


class ImportItemsTool(BaseTool):
    """Tool for importing .eml/.ics/.vcf files into a folder."""

    def get_schema(self) -> Dict[str, Any]:
        return {
            "name": "import_items",
            "description": "Import .eml, .ics or .vcf files into a mailbox folder",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "File or directory to import"
                    },
                    "folder": {
                        "type": "string",
                        "description": "Target folder name or path"
                    },
                    "item_type": {
                        "type": "string",
                        "enum": [t.value for t in ItemType],
                        "description": "Picks the default target folder when folder is omitted"
                    }
                },
                "required": ["path"]
            }
        }

    async def execute(self, **kwargs) -> Dict[str, Any]:
        """Import files."""
        request = self.validate_input(ImportItemsRequest, **kwargs)
        account = self.get_account()
        mailbox = self.get_mailbox_info()
        service = ExportService(account)

        item_type = request.item_type or service.default_item_type(request.path) or ItemType.MAIL
        folder = FolderService(account).resolve_folder(
            request.folder, default=get_item_type_info(item_type).default_folder
        )

        try:
            imported = service.import_items(request.path, folder)
        except EWSMailboxError as e:
            get_audit_logger().log_operation("import_items", mailbox, False, {"error": str(e)})
            raise

        get_audit_logger().log_operation("import_items", mailbox, True, {
            "imported": len(imported), "folder": safe_get(folder, "name", request.folder)
        })
        return format_success_response(
            f"Imported {len(imported)} item(s)",
            files=imported,
            imported_count=len(imported),
            folder=safe_get(folder, "name", request.folder),
            mailbox=mailbox
        )
