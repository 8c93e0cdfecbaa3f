"""Directory (GAL) lookups used to turn a mailbox identity into an SMTP address."""

import logging
from typing import List

from exchangelib.errors import ErrorNameResolutionNoResults

from ..exceptions import IdentityResolutionError, ToolExecutionError
from ..utils import safe_get


class DirectoryAdapter:
    """
    Resolves mailbox identities through EWS ResolveNames.

    Resolution must be unambiguous: zero matches or several matches are
    errors, never an empty or arbitrary mailbox.
    """

    def __init__(self, protocol):
        """
        Initialize directory adapter.

        Args:
            protocol: exchangelib Protocol of the connected account
        """
        self.protocol = protocol
        self.logger = logging.getLogger(__name__)

    def find_mailboxes(self, identity: str) -> List:
        """Return every mailbox the directory matches for ``identity``."""
        try:
            results = self.protocol.resolve_names(
                names=[identity],
                return_full_contact_data=False
            )
        except ErrorNameResolutionNoResults:
            results = []
        except Exception as e:
            self.logger.error(f"Name resolution failed for '{identity}': {e}")
            raise ToolExecutionError(f"Failed to resolve identity '{identity}': {e}")

        mailboxes = []
        for result in results or []:
            # Full-contact responses come back as (mailbox, contact) tuples
            if isinstance(result, tuple):
                result = result[0]
            if isinstance(result, Exception):
                self.logger.debug(f"Skipping resolution error for '{identity}': {result}")
                continue
            if safe_get(result, "email_address"):
                mailboxes.append(result)
        return mailboxes

    def resolve_identity(self, identity: str) -> str:
        """
        Resolve an alias, display name or address to exactly one SMTP address.

        Raises:
            IdentityResolutionError: on zero or multiple matches
        """
        identity = (identity or "").strip()
        if not identity:
            raise IdentityResolutionError("Mailbox identity must not be empty")

        mailboxes = self.find_mailboxes(identity)

        if not mailboxes:
            self.logger.warning(f"No mailbox found for identity '{identity}'")
            raise IdentityResolutionError(f"No mailbox found for identity '{identity}'")

        if len(mailboxes) > 1:
            candidates = ", ".join(
                f"{safe_get(m, 'name', '')} <{m.email_address}>".strip() for m in mailboxes
            )
            self.logger.warning(f"Identity '{identity}' is ambiguous: {candidates}")
            raise IdentityResolutionError(
                f"Identity '{identity}' matches {len(mailboxes)} mailboxes: {candidates}. "
                f"Use a more specific identity such as the full SMTP address."
            )

        address = mailboxes[0].email_address
        self.logger.debug(f"Resolved '{identity}' to {address}")
        return address
