"""Connection tools: opening and closing the active mailbox connection."""

from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from .. import ews_client as session
from ..config import Settings, load_settings
from ..exceptions import ValidationError
from ..models import ConnectRequest
from ..utils import format_success_response
from .base import BaseTool


class ConnectMailboxTool(BaseTool):
    """Tool for connecting to a mailbox."""

    def __init__(self, ews_client=None, settings: Optional[Settings] = None):
        super().__init__(ews_client)
        self.settings = settings

    def get_schema(self) -> Dict[str, Any]:
        return {
            "name": "connect_mailbox",
            "description": "Connect to an Exchange mailbox through EWS. Parameters override environment settings",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "email": {
                        "type": "string",
                        "description": "SMTP address of the connecting account"
                    },
                    "username": {
                        "type": "string",
                        "description": "Logon name (optional, defaults to email)"
                    },
                    "password": {
                        "type": "string",
                        "description": "Password (optional when set in the environment)"
                    },
                    "server_url": {
                        "type": "string",
                        "description": "EWS endpoint or server hostname; disables autodiscover"
                    },
                    "autodiscover": {
                        "type": "boolean",
                        "description": "Locate the EWS endpoint with autodiscover"
                    },
                    "target_mailbox": {
                        "type": "string",
                        "description": "Identity (alias, name or address) of another mailbox to open"
                    },
                    "access_type": {
                        "type": "string",
                        "enum": ["delegate", "impersonation"],
                        "description": "How to access target_mailbox"
                    },
                    "timezone": {
                        "type": "string",
                        "description": "IANA timezone for naive dates (default: UTC)"
                    }
                }
            }
        }

    def build_settings(self, request: ConnectRequest) -> Settings:
        overrides = {
            "ews_email": request.email,
            "ews_username": request.username,
            "ews_password": request.password,
            "ews_server_url": request.server_url,
            "ews_autodiscover": request.autodiscover,
            "timezone": request.timezone,
        }
        if request.server_url and request.autodiscover is None:
            overrides["ews_autodiscover"] = False
        if request.target_mailbox:
            overrides["ews_impersonation_enabled"] = True
        if request.access_type:
            overrides["ews_impersonation_type"] = request.access_type.value

        if self.settings is not None:
            return self.settings.model_copy(
                update={k: v for k, v in overrides.items() if v is not None}
            )
        try:
            return load_settings(**overrides)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid connection settings: {e}")

    async def execute(self, **kwargs) -> Dict[str, Any]:
        """Connect and store the connection as the active one."""
        request = self.validate_input(ConnectRequest, **kwargs)
        settings = self.build_settings(request)

        client = session.connect(settings, target_mailbox=request.target_mailbox)
        self._ews_client = client

        self.logger.info(f"Connected to mailbox {client.mailbox_address}")
        return format_success_response(
            "Connected to mailbox",
            mailbox=client.mailbox_address,
            account=settings.ews_email,
            autodiscover=settings.ews_autodiscover
        )


class DisconnectMailboxTool(BaseTool):
    """Tool for closing the active connection."""

    def get_schema(self) -> Dict[str, Any]:
        return {
            "name": "disconnect_mailbox",
            "description": "Close the active mailbox connection",
            "inputSchema": {"type": "object", "properties": {}}
        }

    async def execute(self, **kwargs) -> Dict[str, Any]:
        closed = session.disconnect()
        message = "Disconnected" if closed else "No active connection"
        return format_success_response(message, disconnected=closed)
