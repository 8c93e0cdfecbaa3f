"""Shared fixtures for the mailbox command tests."""

from unittest.mock import MagicMock, Mock

import pytest
from exchangelib import EWSTimeZone

from ews_mailbox import ews_client as session


def make_folder(name, children=None, is_distinguished=False, **attrs):
    """Build a mock exchangelib folder with named children."""
    folder = MagicMock()
    folder.name = name
    folder.children = list(children or [])
    folder.is_distinguished = is_distinguished
    folder.id = attrs.pop("id", f"id-{name}")
    folder.folder_class = attrs.pop("folder_class", "IPF.Note")
    folder.total_count = attrs.pop("total_count", 0)
    folder.unread_count = attrs.pop("unread_count", 0)
    folder.child_folder_count = len(folder.children)
    for key, value in attrs.items():
        setattr(folder, key, value)
    return folder


class FakeQuery:
    """Stands in for an exchangelib QuerySet: chainable and sliceable."""

    def __init__(self, items):
        self.items = list(items)
        self.slices = []
        self.only_fields = None
        self.ordering = None

    def order_by(self, *fields):
        self.ordering = fields
        return self

    def only(self, *fields):
        self.only_fields = fields
        return self

    def __getitem__(self, key):
        self.slices.append((key.start, key.stop))
        return self.items[key]


@pytest.fixture
def mock_account():
    """Mock exchangelib Account with a small folder tree."""
    account = Mock()
    account.default_timezone = EWSTimeZone("UTC")
    account.protocol = Mock()

    projects = make_folder("Projects", [make_folder("2024")])
    account.inbox = make_folder("Inbox", [projects], is_distinguished=True)
    account.calendar = make_folder("Calendar", is_distinguished=True, folder_class="IPF.Appointment")
    account.contacts = make_folder("Contacts", is_distinguished=True, folder_class="IPF.Contact")
    account.tasks = make_folder("Tasks", is_distinguished=True, folder_class="IPF.Task")
    account.trash = make_folder("Deleted Items", is_distinguished=True)
    account.msg_folder_root = make_folder(
        "Top of Information Store",
        [account.inbox, make_folder("Archive"), account.calendar],
        is_distinguished=True,
    )
    return account


@pytest.fixture
def mock_ews_client(mock_account):
    """Create a mock EWS client for testing."""
    client = Mock()
    client.mailbox = mock_account
    client.account = mock_account
    client.mailbox_address = "admin@company.com"
    client.config.page_size = 100
    return client


@pytest.fixture(autouse=True)
def reset_active_client():
    """Every test starts and ends without an active connection."""
    session.set_active_client(None)
    yield
    session.set_active_client(None)


@pytest.fixture(autouse=True)
def silence_audit_log(monkeypatch):
    from ews_mailbox.middleware import logging as mailbox_logging
    monkeypatch.setattr(mailbox_logging, "_audit_logger", mailbox_logging.AuditLogger())
