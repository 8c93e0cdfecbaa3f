"""Folder tools: list, create and delete mailbox folders."""

from typing import Any, Dict

from ..exceptions import EWSMailboxError, ValidationError
from ..middleware.logging import get_audit_logger
from ..models import CreateFolderRequest, DeleteFolderRequest, FolderType, ListFoldersRequest
from ..services.folder_service import FolderService, is_well_known_folder
from ..utils import ews_id_to_str, format_success_response, safe_get
from .base import BaseTool


class ListFoldersTool(BaseTool):
    """Tool for listing folders."""

    def get_schema(self) -> Dict[str, Any]:
        return {
            "name": "list_folders",
            "description": "List the subfolders of a folder, optionally recursively",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "folder": {
                        "type": "string",
                        "description": "Folder name or path to list (default: top of the mailbox)",
                        "default": "msgfolderroot"
                    },
                    "recurse": {
                        "type": "boolean",
                        "description": "Include all descendants",
                        "default": False
                    }
                }
            }
        }

    async def execute(self, **kwargs) -> Dict[str, Any]:
        """List folders."""
        request = self.validate_input(ListFoldersRequest, **kwargs)
        service = FolderService(self.get_account())

        parent = service.resolve_folder(request.folder)
        folders = service.list_folders(parent, recurse=request.recurse)

        return format_success_response(
            f"Found {len(folders)} folder(s)",
            folders=[f.model_dump() for f in folders],
            total_count=len(folders),
            parent=safe_get(parent, "name", request.folder),
            mailbox=self.get_mailbox_info()
        )


class CreateFolderTool(BaseTool):
    """Tool for creating folders."""

    def get_schema(self) -> Dict[str, Any]:
        return {
            "name": "create_folder",
            "description": "Create a mail, calendar, contacts or tasks folder",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "parent_folder": {
                        "type": "string",
                        "description": "Parent folder name or path (default: top of the mailbox)",
                        "default": "msgfolderroot"
                    },
                    "name": {
                        "type": "string",
                        "description": "New folder name"
                    },
                    "folder_type": {
                        "type": "string",
                        "enum": [t.value for t in FolderType],
                        "description": "Content type of the folder",
                        "default": "Mail"
                    }
                },
                "required": ["name"]
            }
        }

    async def execute(self, **kwargs) -> Dict[str, Any]:
        """Create folder."""
        request = self.validate_input(CreateFolderRequest, **kwargs)
        mailbox = self.get_mailbox_info()
        service = FolderService(self.get_account())

        parent = service.resolve_folder(request.parent_folder)
        try:
            folder = service.create_folder(parent, request.name, request.folder_type)
        except EWSMailboxError as e:
            get_audit_logger().log_operation("create_folder", mailbox, False, {"name": request.name, "error": str(e)})
            raise

        get_audit_logger().log_operation("create_folder", mailbox, True, {
            "name": request.name, "parent": safe_get(parent, "name", request.parent_folder)
        })
        return format_success_response(
            "Folder created",
            folder_id=ews_id_to_str(safe_get(folder, "id")),
            name=request.name,
            folder_type=request.folder_type.value,
            mailbox=mailbox
        )


class DeleteFolderTool(BaseTool):
    """Tool for deleting folders."""

    def get_schema(self) -> Dict[str, Any]:
        return {
            "name": "delete_folder",
            "description": "Delete a user-created folder and its contents",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "folder": {
                        "type": "string",
                        "description": "Folder path, e.g. Inbox/Old Projects"
                    },
                    "delete_mode": {
                        "type": "string",
                        "enum": ["HardDelete", "SoftDelete", "MoveToDeletedItems"],
                        "description": "How to delete the folder",
                        "default": "MoveToDeletedItems"
                    }
                },
                "required": ["folder"]
            }
        }

    async def execute(self, **kwargs) -> Dict[str, Any]:
        """Delete folder."""
        request = self.validate_input(DeleteFolderRequest, **kwargs)
        mailbox = self.get_mailbox_info()

        parts = [p for p in request.folder.strip("/").split("/") if p.strip()]
        if len(parts) == 1 and is_well_known_folder(parts[0]):
            raise ValidationError(f"Refusing to delete well-known folder '{request.folder}'")

        service = FolderService(self.get_account())
        folder = service.resolve_folder(request.folder)
        try:
            service.delete_folder(folder, request.delete_mode)
        except EWSMailboxError as e:
            get_audit_logger().log_operation("delete_folder", mailbox, False, {"folder": request.folder, "error": str(e)})
            raise

        get_audit_logger().log_operation("delete_folder", mailbox, True, {
            "folder": request.folder, "delete_mode": request.delete_mode.value
        })
        return format_success_response(
            "Folder deleted",
            folder=request.folder,
            delete_mode=request.delete_mode.value,
            mailbox=mailbox
        )
