"""Tests for the EWS client wrapper and the active connection."""

from unittest.mock import Mock, patch

import pytest
from exchangelib.errors import UnauthorizedError
from exchangelib.protocol import BaseProtocol, NoVerifyHTTPAdapter

from ews_mailbox import ews_client as session
from ews_mailbox.config import Settings
from ews_mailbox.ews_client import DEFAULT_HTTP_ADAPTER_CLS, EWSClient, normalize_ews_url
from ews_mailbox.exceptions import (
    AuthenticationError,
    ConnectionError,
    IdentityResolutionError,
    NotConnectedError,
)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        ews_email="admin@company.com",
        ews_password="secret",
        ews_server_url="mail.company.com",
        ews_autodiscover=False,
        ews_impersonation_enabled=True,
    )


@pytest.fixture
def auth_handler():
    handler = Mock()
    handler.get_credentials.return_value = Mock(name="credentials")
    handler.get_auth_type.return_value = "NTLM"
    return handler


class TestNormalizeEwsUrl:

    @pytest.mark.parametrize("value, expected", [
        ("https://mail.company.com/EWS/Exchange.asmx", "https://mail.company.com/EWS/Exchange.asmx"),
        ("https://mail.company.com/EWS/", "https://mail.company.com/EWS/Exchange.asmx"),
        ("https://mail.company.com/EWS", "https://mail.company.com/EWS/Exchange.asmx"),
        ("mail.company.com", "https://mail.company.com/EWS/Exchange.asmx"),
        ("http://mail.company.com/", "https://mail.company.com/EWS/Exchange.asmx"),
    ])
    def test_normalize(self, value, expected):
        assert normalize_ews_url(value) == expected


class TestEWSClient:

    @patch("ews_mailbox.ews_client.Configuration")
    @patch("ews_mailbox.ews_client.Account")
    def test_manual_configuration(self, account_cls, config_cls, settings, auth_handler):
        client = EWSClient(settings, auth_handler)

        assert client.account is account_cls.return_value
        assert config_cls.call_args.kwargs["service_endpoint"] == "https://mail.company.com/EWS/Exchange.asmx"
        assert account_cls.call_args.kwargs["autodiscover"] is False
        account_cls.return_value.root.tree.assert_called_once()

    @patch("ews_mailbox.ews_client.Account")
    def test_autodiscover(self, account_cls, settings, auth_handler):
        settings.ews_autodiscover = True

        _ = EWSClient(settings, auth_handler).account

        assert account_cls.call_args.kwargs["autodiscover"] is True
        assert account_cls.call_args.kwargs["primary_smtp_address"] == "admin@company.com"

    @patch("ews_mailbox.ews_client.Account")
    def test_unauthorized_is_not_retried(self, account_cls, settings, auth_handler):
        settings.ews_autodiscover = True
        account_cls.side_effect = UnauthorizedError("401")

        with pytest.raises(AuthenticationError):
            _ = EWSClient(settings, auth_handler).account
        assert account_cls.call_count == 1

    def test_tls_verification_on_by_default(self, settings, auth_handler, monkeypatch):
        monkeypatch.setattr(BaseProtocol, "HTTP_ADAPTER_CLS", NoVerifyHTTPAdapter)

        EWSClient(settings, auth_handler)

        assert BaseProtocol.HTTP_ADAPTER_CLS is DEFAULT_HTTP_ADAPTER_CLS

    def test_tls_verification_can_be_disabled(self, settings, auth_handler, monkeypatch):
        monkeypatch.setattr(BaseProtocol, "HTTP_ADAPTER_CLS", DEFAULT_HTTP_ADAPTER_CLS)
        settings.ews_verify_ssl = False

        EWSClient(settings, auth_handler)

        assert BaseProtocol.HTTP_ADAPTER_CLS is NoVerifyHTTPAdapter

    def test_server_url_required_without_autodiscover(self, settings, auth_handler):
        settings.ews_server_url = None

        with patch.object(EWSClient._create_account.retry, "sleep"):
            with pytest.raises(ConnectionError, match="EWS_SERVER_URL"):
                _ = EWSClient(settings, auth_handler).account

    def test_impersonation_disabled(self, settings, auth_handler):
        settings.ews_impersonation_enabled = False
        client = EWSClient(settings, auth_handler)

        with pytest.raises(ConnectionError, match="Impersonation not enabled"):
            client.get_account("jdoe@company.com")

    def test_primary_address_returns_primary_account(self, settings, auth_handler):
        client = EWSClient(settings, auth_handler)
        client._account = Mock()

        assert client.get_account("ADMIN@company.com") is client._account

    @patch("ews_mailbox.ews_client.Configuration")
    @patch("ews_mailbox.ews_client.Account")
    @patch("ews_mailbox.ews_client.DirectoryAdapter")
    def test_select_mailbox(self, adapter_cls, account_cls, config_cls, settings, auth_handler):
        adapter_cls.return_value.resolve_identity.return_value = "jdoe@company.com"
        client = EWSClient(settings, auth_handler)
        client._account = Mock()

        assert client.select_mailbox("jdoe") == "jdoe@company.com"
        assert client.mailbox_address == "jdoe@company.com"
        assert client.mailbox is account_cls.return_value
        assert account_cls.call_args.kwargs["primary_smtp_address"] == "jdoe@company.com"

    @patch("ews_mailbox.ews_client.DirectoryAdapter")
    def test_select_mailbox_ambiguous(self, adapter_cls, settings, auth_handler):
        adapter_cls.return_value.resolve_identity.side_effect = IdentityResolutionError("ambiguous")
        client = EWSClient(settings, auth_handler)
        client._account = Mock()

        with pytest.raises(IdentityResolutionError):
            client.select_mailbox("John")
        assert client.mailbox_address == "admin@company.com"


class TestActiveConnection:

    def test_no_connection(self):
        with pytest.raises(NotConnectedError):
            session.get_active_client()

    @patch("ews_mailbox.ews_client.EWSClient")
    def test_connect_sets_active_client(self, client_cls, settings):
        client = session.connect(settings)

        assert session.get_active_client() is client is client_cls.return_value
        client.select_mailbox.assert_not_called()

    @patch("ews_mailbox.ews_client.EWSClient")
    def test_connect_with_target_mailbox(self, client_cls, settings):
        session.connect(settings, target_mailbox="jdoe")
        client_cls.return_value.select_mailbox.assert_called_once_with("jdoe")

    @patch("ews_mailbox.ews_client.EWSClient")
    def test_reconnect_closes_previous(self, client_cls, settings):
        first, second = Mock(), Mock()
        client_cls.side_effect = [first, second]

        session.connect(settings)
        session.connect(settings)

        first.close.assert_called_once()
        assert session.get_active_client() is second

    @patch("ews_mailbox.ews_client.EWSClient")
    def test_failed_connect_keeps_no_connection(self, client_cls, settings):
        client_cls.return_value.select_mailbox.side_effect = IdentityResolutionError("none")

        with pytest.raises(IdentityResolutionError):
            session.connect(settings, target_mailbox="ghost")
        with pytest.raises(NotConnectedError):
            session.get_active_client()

    @patch("ews_mailbox.ews_client.EWSClient")
    def test_failed_mailbox_selection_closes_new_client(self, client_cls, settings):
        previous = Mock()
        session.set_active_client(previous)
        client_cls.return_value.select_mailbox.side_effect = IdentityResolutionError("none")

        with pytest.raises(IdentityResolutionError):
            session.connect(settings, target_mailbox="nobody")

        client_cls.return_value.close.assert_called_once()
        previous.close.assert_not_called()
        assert session.get_active_client() is previous

    @patch("ews_mailbox.ews_client.EWSClient")
    def test_disconnect(self, client_cls, settings):
        session.connect(settings)

        assert session.disconnect() is True
        client_cls.return_value.close.assert_called_once()
        assert session.disconnect() is False
