"""Serialisable views of mailbox items and folders."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from ..utils import safe_get, ews_id_to_str


def _address_of(mailbox: Any) -> Optional[str]:
    return safe_get(mailbox, "email_address") or None


def _isoformat(value: Any) -> Optional[str]:
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


class ItemSummary(BaseModel):
    """
    One search result.

    Carries only what an administrator needs to identify an item before
    exporting or deleting it.
    """

    item_id: Optional[str] = Field(None, description="EWS item id")
    changekey: Optional[str] = None
    item_type: str = Field(..., description="Mail, Calendar, Contact or Task")
    subject: str = ""
    address: Optional[str] = Field(None, description="Sender or organizer address")
    date: Optional[str] = Field(None, description="Received time, start time or creation time")
    size: Optional[int] = None
    has_attachments: bool = False

    @classmethod
    def from_ews_item(cls, item: Any, item_type_info) -> "ItemSummary":
        """
        Create ItemSummary from an exchangelib item.

        Args:
            item: exchangelib Message, CalendarItem, Contact or Task
            item_type_info: ItemTypeInfo describing which fields to read
        """
        address = None
        if item_type_info.address_field:
            address = _address_of(safe_get(item, item_type_info.address_field))

        return cls(
            item_id=ews_id_to_str(safe_get(item, "id")),
            changekey=safe_get(item, "changekey"),
            item_type=item_type_info.item_type.value,
            subject=safe_get(item, item_type_info.subject_field, "") or "",
            address=address,
            date=_isoformat(safe_get(item, item_type_info.date_field)),
            size=safe_get(item, "size"),
            has_attachments=bool(safe_get(item, "has_attachments", False)),
        )


class FolderInfo(BaseModel):
    """A mailbox folder as listed by list_folders."""

    folder_id: Optional[str] = None
    name: str
    path: str
    folder_class: Optional[str] = None
    total_count: Optional[int] = None
    unread_count: Optional[int] = None
    child_folder_count: Optional[int] = None

    @classmethod
    def from_ews_folder(cls, folder: Any, path: str) -> "FolderInfo":
        return cls(
            folder_id=ews_id_to_str(safe_get(folder, "id")),
            name=safe_get(folder, "name", "") or "",
            path=path,
            folder_class=safe_get(folder, "folder_class"),
            total_count=safe_get(folder, "total_count"),
            unread_count=safe_get(folder, "unread_count"),
            child_folder_count=safe_get(folder, "child_folder_count"),
        )
