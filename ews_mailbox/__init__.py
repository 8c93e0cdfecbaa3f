"""Exchange Web Services mailbox search, export, import and deletion commands."""

__version__ = "1.0.0"
