"""FolderService - folder resolution, listing, creation and deletion."""

import logging
from typing import Any, List, Optional

from exchangelib import Folder

from ..core.item_summary import FolderInfo
from ..exceptions import FolderNotFoundError, ToolExecutionError, ValidationError
from ..models import DeleteMode, FolderType
from ..utils import safe_get

# Well-known folder names (lowercase) -> Account attribute
WELL_KNOWN_FOLDERS = {
    "inbox": "inbox",
    "sent": "sent",
    "sentitems": "sent",
    "drafts": "drafts",
    "deleted": "trash",
    "deleteditems": "trash",
    "trash": "trash",
    "junk": "junk",
    "junkemail": "junk",
    "outbox": "outbox",
    "calendar": "calendar",
    "contacts": "contacts",
    "tasks": "tasks",
    "notes": "notes",
    "journal": "journal",
    "root": "root",
    "msgfolderroot": "msg_folder_root",
    "topofinformationstore": "msg_folder_root",
}

FOLDER_CLASSES = {
    FolderType.MAIL: "IPF.Note",
    FolderType.CALENDAR: "IPF.Appointment",
    FolderType.CONTACTS: "IPF.Contact",
    FolderType.TASKS: "IPF.Task",
}


def _well_known_key(name: str) -> str:
    return name.strip().lower().replace(" ", "")


def is_well_known_folder(name: str) -> bool:
    return _well_known_key(name) in WELL_KNOWN_FOLDERS


class FolderService:
    """
    Service for folder operations on one mailbox.

    Folders are addressed by well-known name ("Inbox", "Calendar"), by a
    slash separated path starting at a well-known folder ("Inbox/Projects/2024")
    or by a bare name of a top level folder.
    """

    def __init__(self, account):
        """
        Initialize FolderService.

        Args:
            account: exchangelib Account of the mailbox
        """
        self.account = account
        self.logger = logging.getLogger(__name__)

    def get_well_known(self, name: str):
        try:
            return getattr(self.account, WELL_KNOWN_FOLDERS[_well_known_key(name)])
        except Exception as e:
            raise FolderNotFoundError(f"Well-known folder '{name}' is not available in this mailbox: {e}")

    def find_child(self, parent: Any, name: str) -> Optional[Any]:
        """Return the direct child of ``parent`` named ``name`` (case-insensitive), if any."""
        target = name.strip().lower()
        try:
            for child in parent.children:
                if (safe_get(child, "name", "") or "").lower() == target:
                    return child
        except Exception as e:
            raise ToolExecutionError(
                f"Error accessing subfolders of '{safe_get(parent, 'name', '?')}': {e}"
            )
        return None

    def resolve_folder(self, folder_identifier: Optional[str], default: str = "inbox"):
        """
        Resolve folder from a well-known name, a path or a top level folder name.

        Raises:
            FolderNotFoundError: when any part of the path does not exist
        """
        folder_identifier = (folder_identifier or default).strip().strip("/")
        if not folder_identifier:
            folder_identifier = default

        parts = [p.strip() for p in folder_identifier.split("/") if p.strip()]

        if is_well_known_folder(parts[0]):
            current = self.get_well_known(parts[0])
            remaining = parts[1:]
        else:
            current = self.account.msg_folder_root
            remaining = parts

        for subfolder_name in remaining:
            child = self.find_child(current, subfolder_name)
            if child is None:
                raise FolderNotFoundError(
                    f"Subfolder '{subfolder_name}' not found under '{safe_get(current, 'name', '?')}'"
                )
            current = child

        self.logger.debug(f"Resolved folder '{folder_identifier}' to {safe_get(current, 'name', '?')}")
        return current

    def list_folders(self, folder: Any, recurse: bool = False) -> List[FolderInfo]:
        """List subfolders of ``folder``; paths are relative to it."""
        results = []

        def visit(parent, prefix):
            for child in parent.children:
                name = safe_get(child, "name", "") or ""
                path = f"{prefix}/{name}" if prefix else name
                results.append(FolderInfo.from_ews_folder(child, path))
                if recurse:
                    visit(child, path)

        try:
            visit(folder, "")
        except Exception as e:
            raise ToolExecutionError(f"Failed to list folders under '{safe_get(folder, 'name', '?')}': {e}")
        return results

    def create_folder(self, parent: Any, name: str, folder_type: FolderType = FolderType.MAIL):
        """Create a subfolder of ``parent`` with the content class of ``folder_type``."""
        if self.find_child(parent, name) is not None:
            raise ToolExecutionError(
                f"Folder '{name}' already exists under '{safe_get(parent, 'name', '?')}'"
            )

        folder = Folder(parent=parent, name=name, folder_class=FOLDER_CLASSES[FolderType(folder_type)])
        try:
            folder.save()
        except Exception as e:
            raise ToolExecutionError(f"Failed to create folder '{name}': {e}")

        self.logger.info(f"Created {FolderType(folder_type).value} folder '{name}' under '{safe_get(parent, 'name', '?')}'")
        return folder

    def delete_folder(self, folder: Any, delete_mode: DeleteMode = DeleteMode.MOVE_TO_DELETED_ITEMS) -> None:
        """Delete a user-created folder. Distinguished folders are refused."""
        if safe_get(folder, "is_distinguished", False):
            raise ValidationError(f"Refusing to delete well-known folder '{safe_get(folder, 'name', '?')}'")

        try:
            folder.delete(delete_type=DeleteMode(delete_mode).value)
        except Exception as e:
            raise ToolExecutionError(f"Failed to delete folder '{safe_get(folder, 'name', '?')}': {e}")

        self.logger.info(f"Deleted folder '{safe_get(folder, 'name', '?')}' ({DeleteMode(delete_mode).value})")
