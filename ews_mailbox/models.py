"""Request models and enumerations for the mailbox commands."""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator


UNLIMITED = "Unlimited"
DEFAULT_RESULT_SIZE = 1000


class ItemType(str, Enum):
    """Kinds of mailbox items the commands operate on."""
    MAIL = "Mail"
    CALENDAR = "Calendar"
    CONTACT = "Contact"
    TASK = "Task"


class DeleteMode(str, Enum):
    """How deleted items and folders are disposed of."""
    HARD_DELETE = "HardDelete"
    SOFT_DELETE = "SoftDelete"
    MOVE_TO_DELETED_ITEMS = "MoveToDeletedItems"


class FolderType(str, Enum):
    """Folder content classes that can be created."""
    MAIL = "Mail"
    CALENDAR = "Calendar"
    CONTACTS = "Contacts"
    TASKS = "Tasks"


class AccessType(str, Enum):
    DELEGATE = "delegate"
    IMPERSONATION = "impersonation"


ResultSize = Union[int, Literal["Unlimited"]]


def normalize_result_size(value) -> Optional[int]:
    """Return the item cap for a result size, or None for Unlimited."""
    if value is None:
        return DEFAULT_RESULT_SIZE
    if isinstance(value, str):
        if value.strip().lower() == UNLIMITED.lower():
            return None
        value = int(value)
    if value <= 0:
        raise ValueError("result_size must be a positive integer or 'Unlimited'")
    return value


class ConnectRequest(BaseModel):
    """Parameters for connecting to a mailbox."""
    email: Optional[str] = Field(None, description="Connecting account SMTP address")
    username: Optional[str] = None
    password: Optional[str] = None
    server_url: Optional[str] = None
    autodiscover: Optional[bool] = None
    target_mailbox: Optional[str] = Field(None, description="Identity of the mailbox to open")
    access_type: Optional[AccessType] = None
    timezone: Optional[str] = None


class ItemSearchRequest(BaseModel):
    """Parameters shared by search, delete and export."""
    item_type: ItemType = ItemType.MAIL
    folder: Optional[str] = Field(None, description="Folder name or path; defaults to the item type's folder")
    subject: Optional[str] = Field(None, description="Subject substring")
    address: Optional[str] = Field(None, description="Sender/organizer address substring")
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    result_size: ResultSize = DEFAULT_RESULT_SIZE

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def accept_bare_dates(cls, v):
        # "2024-01-31" means midnight at the start of that day
        if isinstance(v, str) and len(v.strip()) == 10:
            return v.strip() + "T00:00:00"
        return v

    @field_validator("result_size", mode="before")
    @classmethod
    def validate_result_size(cls, v):
        if isinstance(v, str) and v.strip().lower() == UNLIMITED.lower():
            return UNLIMITED
        return v

    @field_validator("result_size")
    @classmethod
    def validate_positive(cls, v):
        if isinstance(v, int) and v <= 0:
            raise ValueError("result_size must be a positive integer or 'Unlimited'")
        return v

    @model_validator(mode="after")
    def validate_date_range(self):
        start, end = self.start_date, self.end_date
        if start and end:
            if (start.tzinfo is None) != (end.tzinfo is None):
                # Mixed naive/aware bounds are compared with the naive one as UTC
                start, end = (d if d.tzinfo else d.replace(tzinfo=timezone.utc) for d in (start, end))
            if end <= start:
                raise ValueError("end_date must be after start_date")
        if self.address and self.item_type in (ItemType.CONTACT, ItemType.TASK):
            raise ValueError(f"address filter is not supported for {self.item_type.value} items")
        return self

    @property
    def limit(self) -> Optional[int]:
        return normalize_result_size(self.result_size)


class DeleteItemsRequest(ItemSearchRequest):
    delete_mode: DeleteMode = DeleteMode.MOVE_TO_DELETED_ITEMS


class ExportItemsRequest(ItemSearchRequest):
    path: str = Field(..., description="Directory to write exported files to")


class ImportItemsRequest(BaseModel):
    path: str = Field(..., description="File or directory of .eml/.ics/.vcf files")
    folder: Optional[str] = None
    item_type: Optional[ItemType] = Field(
        None, description="Selects the default target folder when folder is omitted"
    )


class ListFoldersRequest(BaseModel):
    folder: str = "msgfolderroot"
    recurse: bool = False


class CreateFolderRequest(BaseModel):
    parent_folder: str = "msgfolderroot"
    name: str = Field(..., min_length=1)
    folder_type: FolderType = FolderType.MAIL

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v or "/" in v:
            raise ValueError("Folder name must be non-empty and must not contain '/'")
        return v


class DeleteFolderRequest(BaseModel):
    folder: str = Field(..., min_length=1)
    delete_mode: DeleteMode = DeleteMode.MOVE_TO_DELETED_ITEMS
