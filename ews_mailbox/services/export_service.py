"""ExportService - writing items to MIME/iCalendar/vCard files and reading them back."""

import logging
from pathlib import Path
from typing import Any, List, Optional

from ..core.item_types import get_item_type_info, item_type_for_extension
from ..exceptions import ToolExecutionError, ValidationError
from ..utils import safe_get, sanitize_filename


class ExportService:
    """
    Service for moving items between a mailbox and the file system.

    Exchange produces and parses the payloads itself (EWS MimeContent is
    RFC 2822 for mail, iCalendar for calendar items and vCard for contacts),
    so files are written and uploaded byte for byte.
    """

    def __init__(self, account):
        self.account = account
        self.logger = logging.getLogger(__name__)

    def export_items(self, items: List[Any], item_type, directory: str) -> List[str]:
        """
        Write each item's MIME content to ``directory``.

        Returns:
            Paths of the written files, in item order
        """
        info = get_item_type_info(item_type)
        target = Path(directory).expanduser()
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ToolExecutionError(f"Cannot create export directory '{target}': {e}")

        written = []
        for index, item in enumerate(items, start=1):
            content = safe_get(item, "mime_content")
            if not content:
                raise ToolExecutionError(
                    f"Item {index} ('{safe_get(item, info.subject_field, '')}') has no MIME content to export"
                )
            if isinstance(content, str):
                content = content.encode("utf-8")

            title = sanitize_filename(safe_get(item, info.subject_field, ""))
            file_path = target / f"{index:04d}_{title}{info.file_extension}"
            try:
                file_path.write_bytes(content)
            except OSError as e:
                raise ToolExecutionError(f"Failed to write '{file_path}': {e}")

            self.logger.debug(f"Exported {file_path} ({len(content)} bytes)")
            written.append(str(file_path))

        self.logger.info(f"Exported {len(written)} {info.item_type.value} item(s) to {target}")
        return written

    def collect_import_files(self, path: str) -> List[Path]:
        """
        Return the importable files at ``path``.

        A single file must have a supported extension. In a directory, files
        with other extensions are skipped.
        """
        source = Path(path).expanduser()
        if not source.exists():
            raise ValidationError(f"Import path '{source}' does not exist")

        if source.is_file():
            if item_type_for_extension(source.suffix) is None:
                raise ValidationError(
                    f"Unsupported file type '{source.suffix}'. Supported: .eml, .ics, .vcf"
                )
            return [source]

        files = []
        for candidate in sorted(source.iterdir()):
            if not candidate.is_file():
                continue
            if item_type_for_extension(candidate.suffix) is None:
                self.logger.warning(f"Skipping unsupported file: {candidate.name}")
                continue
            files.append(candidate)
        return files

    def import_file(self, file_path: Path, folder: Any):
        """Create one item in ``folder`` from the MIME content of ``file_path``."""
        item_type = item_type_for_extension(file_path.suffix)
        info = get_item_type_info(item_type)

        try:
            content = file_path.read_bytes()
        except OSError as e:
            raise ToolExecutionError(f"Failed to read '{file_path}': {e}")

        item = info.item_class(account=self.account, folder=folder, mime_content=content)
        try:
            # Message.save() stores the item without sending it
            item.save()
        except Exception as e:
            raise ToolExecutionError(f"Failed to import '{file_path.name}': {e}")

        self.logger.debug(f"Imported {file_path.name} as {info.item_type.value}")
        return item

    def import_items(self, path: str, folder: Any) -> List[str]:
        """
        Import every supported file at ``path`` into ``folder``.

        Stops at the first failure.

        Returns:
            Names of the imported files
        """
        files = self.collect_import_files(path)
        imported = []
        for file_path in files:
            self.import_file(file_path, folder)
            imported.append(file_path.name)

        self.logger.info(f"Imported {len(imported)} file(s) into '{safe_get(folder, 'name', '?')}'")
        return imported

    @staticmethod
    def default_item_type(path: str) -> Optional[Any]:
        """Item type implied by a single file path, used to pick the default target folder."""
        source = Path(path)
        if source.is_file():
            return item_type_for_extension(source.suffix)
        return None
