"""Tests for folder resolution, listing, creation and deletion."""

from unittest.mock import PropertyMock, patch

import pytest

from ews_mailbox.exceptions import FolderNotFoundError, ToolExecutionError, ValidationError
from ews_mailbox.models import DeleteMode, FolderType
from ews_mailbox.services.folder_service import FolderService, is_well_known_folder

from .conftest import make_folder


class TestResolveFolder:

    @pytest.mark.parametrize("name", ["inbox", "Inbox", "INBOX", " inbox "])
    def test_well_known_case_insensitive(self, mock_account, name):
        assert FolderService(mock_account).resolve_folder(name) is mock_account.inbox

    def test_deleted_items_alias(self, mock_account):
        service = FolderService(mock_account)
        assert service.resolve_folder("Deleted Items") is mock_account.trash
        assert service.resolve_folder("deleted") is mock_account.trash

    def test_default_when_empty(self, mock_account):
        assert FolderService(mock_account).resolve_folder(None, default="calendar") is mock_account.calendar

    def test_nested_path(self, mock_account):
        folder = FolderService(mock_account).resolve_folder("Inbox/projects/2024")
        assert folder.name == "2024"

    def test_top_level_custom_folder(self, mock_account):
        folder = FolderService(mock_account).resolve_folder("Archive")
        assert folder.name == "Archive"

    def test_missing_subfolder_names_parent(self, mock_account):
        with pytest.raises(FolderNotFoundError, match="'Missing' not found under 'Projects'"):
            FolderService(mock_account).resolve_folder("Inbox/Projects/Missing")

    def test_missing_top_level_folder(self, mock_account):
        with pytest.raises(FolderNotFoundError):
            FolderService(mock_account).resolve_folder("Nonexistent")

    def test_is_well_known_folder(self):
        assert is_well_known_folder("Sent Items")
        assert is_well_known_folder("msgfolderroot")
        assert not is_well_known_folder("Projects")


class TestListFolders:

    def test_direct_children(self, mock_account):
        folders = FolderService(mock_account).list_folders(mock_account.inbox)
        assert [f.path for f in folders] == ["Projects"]

    def test_recursive_paths(self, mock_account):
        folders = FolderService(mock_account).list_folders(mock_account.msg_folder_root, recurse=True)
        assert [f.path for f in folders] == [
            "Inbox", "Inbox/Projects", "Inbox/Projects/2024", "Archive", "Calendar"
        ]
        assert folders[-1].folder_class == "IPF.Appointment"

    def test_listing_failure(self, mock_account):
        broken = make_folder("Broken")
        type(broken).children = PropertyMock(side_effect=RuntimeError("boom"))
        with pytest.raises(ToolExecutionError):
            FolderService(mock_account).list_folders(broken)


class TestCreateFolder:

    @patch("ews_mailbox.services.folder_service.Folder")
    def test_creates_typed_folder(self, folder_cls, mock_account):
        FolderService(mock_account).create_folder(mock_account.inbox, "Meetings", FolderType.CALENDAR)

        folder_cls.assert_called_once_with(
            parent=mock_account.inbox, name="Meetings", folder_class="IPF.Appointment"
        )
        folder_cls.return_value.save.assert_called_once()

    @patch("ews_mailbox.services.folder_service.Folder")
    def test_existing_name_rejected(self, folder_cls, mock_account):
        with pytest.raises(ToolExecutionError, match="already exists"):
            FolderService(mock_account).create_folder(mock_account.inbox, "projects")
        folder_cls.assert_not_called()

    @patch("ews_mailbox.services.folder_service.Folder")
    def test_save_failure(self, folder_cls, mock_account):
        folder_cls.return_value.save.side_effect = RuntimeError("access denied")
        with pytest.raises(ToolExecutionError, match="access denied"):
            FolderService(mock_account).create_folder(mock_account.inbox, "New")


class TestDeleteFolder:

    def test_delete_with_mode(self, mock_account):
        folder = mock_account.inbox.children[0]
        FolderService(mock_account).delete_folder(folder, DeleteMode.SOFT_DELETE)
        folder.delete.assert_called_once_with(delete_type="SoftDelete")

    def test_distinguished_folder_refused(self, mock_account):
        with pytest.raises(ValidationError):
            FolderService(mock_account).delete_folder(mock_account.inbox)
        mock_account.inbox.delete.assert_not_called()

    def test_library_failure(self, mock_account):
        folder = mock_account.inbox.children[0]
        folder.delete.side_effect = RuntimeError("folder in use")
        with pytest.raises(ToolExecutionError, match="folder in use"):
            FolderService(mock_account).delete_folder(folder)
