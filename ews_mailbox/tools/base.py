"""Base class for mailbox command tools."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..ews_client import EWSClient, get_active_client
from ..exceptions import EWSMailboxError, ValidationError
from ..utils import format_error_response

ModelT = TypeVar("ModelT", bound=BaseModel)


class BaseTool(ABC):
    """
    A single mailbox command.

    Tools run against an explicit client when one is given, otherwise
    against the active connection opened by connect_mailbox.
    """

    def __init__(self, ews_client: Optional[EWSClient] = None):
        self._ews_client = ews_client
        self.logger = logging.getLogger(self.__class__.__module__)

    @property
    def ews_client(self) -> EWSClient:
        if self._ews_client is not None:
            return self._ews_client
        return get_active_client()

    @property
    def name(self) -> str:
        return self.get_schema()["name"]

    @abstractmethod
    def get_schema(self) -> Dict[str, Any]:
        """Return the tool name, description and JSON input schema."""

    @abstractmethod
    async def execute(self, **kwargs) -> Dict[str, Any]:
        """Run the command."""

    def validate_input(self, model: Type[ModelT], **kwargs) -> ModelT:
        """Validate keyword arguments against a request model."""
        try:
            return model(**{k: v for k, v in kwargs.items() if v is not None})
        except PydanticValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'request'}: {err['msg']}"
                for err in e.errors()
            )
            raise ValidationError(f"Invalid parameters for {self.name}: {problems}")

    def get_account(self):
        """Account of the mailbox commands operate on."""
        return self.ews_client.mailbox

    def get_mailbox_info(self) -> str:
        return self.ews_client.mailbox_address

    async def safe_execute(self, **kwargs) -> Dict[str, Any]:
        """Run the command, turning command errors into an error payload."""
        try:
            return await self.execute(**kwargs)
        except EWSMailboxError as e:
            self.logger.error(f"{self.name} failed: {e}")
            return format_error_response(str(e), tool=self.name, error_type=type(e).__name__)
