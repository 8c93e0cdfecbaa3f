"""Per item type behaviour: default folder, item class, export format and filter fields."""

from dataclasses import dataclass
from typing import Optional, Type

from exchangelib import CalendarItem, Contact, Message, Task
from exchangelib.items import Item

from ..models import ItemType


@dataclass(frozen=True)
class ItemTypeInfo:
    item_type: ItemType
    item_class: Type[Item]
    default_folder: str         # Account attribute of the well-known folder
    file_extension: str         # Extension of the exported MIME content
    subject_field: str
    address_field: Optional[str]
    date_field: str


ITEM_TYPES = {
    ItemType.MAIL: ItemTypeInfo(
        item_type=ItemType.MAIL,
        item_class=Message,
        default_folder="inbox",
        file_extension=".eml",
        subject_field="subject",
        address_field="sender",
        date_field="datetime_received",
    ),
    ItemType.CALENDAR: ItemTypeInfo(
        item_type=ItemType.CALENDAR,
        item_class=CalendarItem,
        default_folder="calendar",
        file_extension=".ics",
        subject_field="subject",
        address_field="organizer",
        date_field="start",
    ),
    ItemType.CONTACT: ItemTypeInfo(
        item_type=ItemType.CONTACT,
        item_class=Contact,
        default_folder="contacts",
        file_extension=".vcf",
        subject_field="display_name",
        address_field=None,
        date_field="datetime_created",
    ),
    ItemType.TASK: ItemTypeInfo(
        item_type=ItemType.TASK,
        item_class=Task,
        default_folder="tasks",
        file_extension=".eml",
        subject_field="subject",
        address_field=None,
        date_field="datetime_created",
    ),
}

# Import direction: file extension -> item type
EXTENSION_ITEM_TYPES = {
    ".eml": ItemType.MAIL,
    ".ics": ItemType.CALENDAR,
    ".vcf": ItemType.CONTACT,
}


def get_item_type_info(item_type) -> ItemTypeInfo:
    return ITEM_TYPES[ItemType(item_type)]


def item_type_for_extension(extension: str) -> Optional[ItemType]:
    return EXTENSION_ITEM_TYPES.get(extension.lower())
