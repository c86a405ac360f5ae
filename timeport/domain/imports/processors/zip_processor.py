import io
import logging
import os
import zipfile
import zlib
from typing import Dict, Optional, Union

from ..exceptions import ParseError
from .csv_processor import decode_payload

logger = logging.getLogger(__name__)


def open_archive(data: Union[bytes, str]) -> zipfile.ZipFile:
    """Open a ZIP payload held in memory."""
    if isinstance(data, str):
        raise ParseError("Invalid ZIP: expected binary data")
    try:
        return zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as exc:
        raise ParseError(f"Invalid ZIP: {exc}") from exc


def index_members(archive: zipfile.ZipFile) -> Dict[str, zipfile.ZipInfo]:
    """
    Map lower-cased base file names to archive members.

    Exports are often re-zipped with a top-level folder, so members are
    matched by file name. Directories and macOS metadata are skipped.
    """
    members: Dict[str, zipfile.ZipInfo] = {}
    for info in archive.infolist():
        if info.is_dir():
            continue
        archive_path = info.filename
        if "__MACOSX" in archive_path or os.path.basename(archive_path).startswith("._"):
            continue
        file_name = os.path.basename(archive_path).lower()
        if file_name in members:
            logger.warning(f"Archive contains '{file_name}' more than once; using '{members[file_name].filename}'")
            continue
        members[file_name] = info
    logger.info(f"Archive contains {len(members)} usable files")
    return members


def read_member_text(
    archive: zipfile.ZipFile,
    members: Dict[str, zipfile.ZipInfo],
    file_name: str,
    *,
    required: bool = True,
) -> Optional[str]:
    """Return the decoded text of ``file_name`` or None when optional and absent."""
    info = members.get(file_name.lower())
    if info is None:
        if required:
            raise ParseError(f'File "{file_name}" missing in ZIP')
        return None
    try:
        raw = archive.read(info)
    except (zipfile.BadZipFile, zlib.error, KeyError, OSError) as exc:
        raise ParseError(f'File "{file_name}" can not be opened') from exc
    text = decode_payload(raw, source=f'File "{file_name}"')
    if not text.strip():
        raise ParseError(f'File "{file_name}" is empty')
    return text
