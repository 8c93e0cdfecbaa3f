"""Custom exceptions for EWS mailbox commands."""


class EWSMailboxError(Exception):
    """Base exception for all mailbox command errors."""
    pass


class ConnectionError(EWSMailboxError):
    """Failed to connect to Exchange."""
    pass


class AuthenticationError(EWSMailboxError):
    """Authentication with Exchange failed."""
    pass


class NotConnectedError(EWSMailboxError):
    """A command ran before any mailbox connection was made."""

    def __init__(self, message: str = "No active mailbox connection. Run connect_mailbox first."):
        super().__init__(message)


class ValidationError(EWSMailboxError):
    """Command parameters failed validation."""
    pass


class IdentityResolutionError(EWSMailboxError):
    """A mailbox identity resolved to zero or several directory entries."""
    pass


class FolderNotFoundError(EWSMailboxError):
    """A named folder or subfolder does not exist."""
    pass


class ToolExecutionError(EWSMailboxError):
    """An Exchange call failed while running a command."""
    pass
