"""Exchange Web Services client wrapper and the active mailbox connection."""

import logging
from typing import Dict, Optional

import urllib3
from exchangelib import Account, Configuration, DELEGATE, IMPERSONATION, EWSTimeZone
from exchangelib.errors import UnauthorizedError, UnknownTimeZone
from exchangelib.protocol import BaseProtocol, NoVerifyHTTPAdapter
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .adapters.directory_adapter import DirectoryAdapter
from .auth import AuthHandler
from .config import Settings
from .exceptions import AuthenticationError, ConnectionError, NotConnectedError

DEFAULT_HTTP_ADAPTER_CLS = BaseProtocol.HTTP_ADAPTER_CLS

EWS_PATH = "/EWS/Exchange.asmx"


def normalize_ews_url(ews_input: str) -> str:
    """
    Turn a server URL, partial URL or bare hostname into a full EWS endpoint.

    Accepts:
      - Full URL: https://mail.company.com/EWS/Exchange.asmx
      - Partial URL: https://mail.company.com/EWS/
      - Just hostname: mail.company.com
    """
    ews_input = ews_input.strip()
    if ews_input.endswith(EWS_PATH):
        return ews_input
    if "/EWS/" in ews_input or ews_input.rstrip("/").endswith("/EWS"):
        if ews_input.endswith(".asmx"):
            return ews_input
        return ews_input.rstrip("/") + "/Exchange.asmx"
    server = ews_input.replace("https://", "").replace("http://", "").rstrip("/")
    return f"https://{server}{EWS_PATH}"


class EWSClient:
    """Exchange Web Services client wrapper with connection management."""

    def __init__(self, config: Settings, auth_handler: Optional[AuthHandler] = None):
        self.config = config
        self.auth_handler = auth_handler or AuthHandler(config)
        self.logger = logging.getLogger(__name__)
        self._account: Optional[Account] = None
        self._impersonated_accounts: Dict[str, Account] = {}
        self._mailbox_address: Optional[str] = None

        # Configure exchangelib
        if self.config.ews_verify_ssl:
            BaseProtocol.HTTP_ADAPTER_CLS = DEFAULT_HTTP_ADAPTER_CLS
        else:
            self.logger.warning("TLS certificate verification is disabled (EWS_VERIFY_SSL=false)")
            # Suppress SSL warnings when using NoVerifyHTTPAdapter
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
            BaseProtocol.HTTP_ADAPTER_CLS = NoVerifyHTTPAdapter
        BaseProtocol.TIMEOUT = self.config.request_timeout

    @property
    def account(self) -> Account:
        """Lazy load account connection."""
        if self._account is None:
            self._account = self._create_account()
        return self._account

    @property
    def mailbox(self) -> Account:
        """The account commands operate on: the selected mailbox, or the primary one."""
        return self.get_account(self._mailbox_address)

    @property
    def mailbox_address(self) -> str:
        return self._mailbox_address or self.config.ews_email

    def _get_timezone(self) -> EWSTimeZone:
        try:
            return EWSTimeZone(self.config.timezone)
        except UnknownTimeZone as e:
            self.logger.warning(f"Failed to load timezone {self.config.timezone}, falling back to UTC: {e}")
            return EWSTimeZone("UTC")

    def _build_account(self, primary_smtp_address: str, access_type) -> Account:
        credentials = self.auth_handler.get_credentials()
        tz = self._get_timezone()

        if self.config.ews_autodiscover:
            self.logger.info(f"Using autodiscovery for {primary_smtp_address}")
            return Account(
                primary_smtp_address=primary_smtp_address,
                credentials=credentials,
                autodiscover=True,
                access_type=access_type,
                default_timezone=tz,
            )

        if not self.config.ews_server_url:
            raise ConnectionError("EWS_SERVER_URL required when autodiscover is disabled")

        ews_url = normalize_ews_url(self.config.ews_server_url)
        self.logger.info(f"Using EWS endpoint: {ews_url}")
        config = Configuration(
            service_endpoint=ews_url,
            credentials=credentials,
            auth_type=self.auth_handler.get_auth_type(),
            retry_policy=None,  # Disable built-in retry, we handle it
            max_connections=self.config.connection_pool_size,
        )
        return Account(
            primary_smtp_address=primary_smtp_address,
            config=config,
            autodiscover=False,
            access_type=access_type,
            default_timezone=tz,
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(ConnectionError),
        reraise=True,
    )
    def _create_account(self) -> Account:
        """Create Exchange account with retry logic."""
        try:
            self.logger.info(f"Connecting to Exchange for {self.config.ews_email}")
            account = self._build_account(self.config.ews_email, DELEGATE)

            # Test the connection
            _ = account.root.tree()
            self.logger.info("Successfully connected to Exchange")
            return account

        except AuthenticationError:
            raise
        except UnauthorizedError as e:
            self.logger.error(f"Authentication failed for {self.config.username}: {e}")
            raise AuthenticationError(f"Authentication failed for {self.config.username}: {e}")
        except ConnectionError:
            raise
        except Exception as e:
            self.logger.error(f"Failed to create account: {e}")
            raise ConnectionError(f"Failed to connect to Exchange: {e}")

    def select_mailbox(self, identity: Optional[str]) -> str:
        """
        Point commands at another mailbox.

        The identity (alias, display name or address) is resolved against the
        directory first; it must match exactly one mailbox.
        """
        if not identity:
            self._mailbox_address = None
            return self.config.ews_email

        address = DirectoryAdapter(self.account.protocol).resolve_identity(identity)
        self.get_account(address)
        self._mailbox_address = None if address.lower() == self.config.ews_email.lower() else address
        self.logger.info(f"Selected mailbox {address} for identity '{identity}'")
        return address

    def get_account(self, target_mailbox: Optional[str] = None) -> Account:
        """
        Get Exchange account, optionally for a different mailbox.

        Args:
            target_mailbox: Email address to impersonate/delegate.
                           If None, returns primary account.

        Raises:
            ConnectionError: If impersonation is not enabled or fails
        """
        if not target_mailbox or target_mailbox.lower() == self.config.ews_email.lower():
            return self.account

        if not self.config.ews_impersonation_enabled:
            raise ConnectionError(
                f"Impersonation not enabled. Set EWS_IMPERSONATION_ENABLED=true "
                f"to access mailbox: {target_mailbox}"
            )

        cache_key = target_mailbox.lower()
        if cache_key in self._impersonated_accounts:
            self.logger.debug(f"Using cached account for {target_mailbox}")
            return self._impersonated_accounts[cache_key]

        try:
            self.logger.info(f"Creating impersonated account for {target_mailbox}")
            access_type = (
                IMPERSONATION
                if self.config.ews_impersonation_type == "impersonation"
                else DELEGATE
            )
            impersonated_account = self._build_account(target_mailbox, access_type)

            # Test connection
            _ = impersonated_account.root.tree()

            self._impersonated_accounts[cache_key] = impersonated_account
            self.logger.info(f"Successfully connected to mailbox: {target_mailbox}")
            return impersonated_account

        except Exception as e:
            self.logger.error(f"Failed to access mailbox {target_mailbox}: {e}")
            raise ConnectionError(
                f"Failed to access mailbox {target_mailbox}: {e}. "
                f"Ensure the service account has ApplicationImpersonation role "
                f"or delegate access to this mailbox."
            )

    def clear_impersonation_cache(self) -> None:
        """Clear cached impersonated accounts."""
        for email, account in self._impersonated_accounts.items():
            try:
                account.protocol.close()
                self.logger.debug(f"Closed impersonated connection for {email}")
            except Exception as e:
                self.logger.warning(f"Failed to close connection for {email}: {e}")
        self._impersonated_accounts.clear()
        self._mailbox_address = None

    def close(self) -> None:
        """Close all connections and cleanup."""
        self.clear_impersonation_cache()

        if self._account:
            self.logger.info("Closing EWS connection")
            self._account.protocol.close()
            self._account = None


# The active connection shared by every command in this process
_active_client: Optional[EWSClient] = None


def connect(config: Settings, target_mailbox: Optional[str] = None,
            auth_handler: Optional[AuthHandler] = None) -> EWSClient:
    """Open a connection and make it the active one, replacing any previous connection."""
    global _active_client
    client = EWSClient(config, auth_handler)
    try:
        _ = client.account
        if target_mailbox:
            client.select_mailbox(target_mailbox)
    except Exception:
        client.close()
        raise

    if _active_client is not None:
        _active_client.close()
    _active_client = client
    return client


def get_active_client() -> EWSClient:
    """Return the active connection, failing when connect() has not been called."""
    if _active_client is None:
        raise NotConnectedError()
    return _active_client


def set_active_client(client: Optional[EWSClient]) -> None:
    global _active_client
    _active_client = client


def disconnect() -> bool:
    """Close the active connection. Returns False when nothing was connected."""
    global _active_client
    if _active_client is None:
        return False
    _active_client.close()
    _active_client = None
    return True
