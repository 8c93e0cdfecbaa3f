"""Credential construction for Exchange connections."""

import logging

from exchangelib import Credentials, OAuth2Credentials, Identity

from .config import Settings
from .exceptions import AuthenticationError


class AuthHandler:
    """Builds exchangelib credentials from settings."""

    def __init__(self, config: Settings):
        self.config = config
        self.logger = logging.getLogger(__name__)

    def get_credentials(self):
        """Return Credentials or OAuth2Credentials for the configured auth type."""
        if self.config.ews_auth_type == "oauth2":
            missing = [
                name for name in ("ews_client_id", "ews_client_secret", "ews_tenant_id")
                if not getattr(self.config, name)
            ]
            if missing:
                raise AuthenticationError(
                    f"OAuth2 authentication requires: {', '.join(m.upper() for m in missing)}"
                )
            self.logger.debug(f"Using OAuth2 credentials for {self.config.ews_email}")
            return OAuth2Credentials(
                client_id=self.config.ews_client_id,
                client_secret=self.config.ews_client_secret,
                tenant_id=self.config.ews_tenant_id,
                identity=Identity(primary_smtp_address=self.config.ews_email),
            )

        if not self.config.ews_password:
            raise AuthenticationError(
                f"EWS_PASSWORD is required for {self.config.ews_auth_type} authentication"
            )
        self.logger.debug(f"Using {self.config.ews_auth_type} credentials for {self.config.username}")
        return Credentials(username=self.config.username, password=self.config.ews_password)

    def get_auth_type(self):
        """Return the exchangelib auth_type constant, or None to let exchangelib guess."""
        from exchangelib.transport import BASIC, NTLM, OAUTH2

        return {"basic": BASIC, "ntlm": NTLM, "oauth2": OAUTH2}[self.config.ews_auth_type]
