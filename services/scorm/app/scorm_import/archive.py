"""Reading ``imsmanifest.xml`` out of an uploaded SCORM ZIP."""

from __future__ import annotations

import io
import zipfile

from app.exceptions import InvalidScormArchiveError
from app.scorm_import.messages import CANNOT_LOAD_IMSMANIFEST, INVALID_SCORM_ARCHIVE

MANIFEST_NAME = "imsmanifest.xml"


def _open(archive_bytes: bytes) -> zipfile.ZipFile:
    if not zipfile.is_zipfile(io.BytesIO(archive_bytes)):
        raise InvalidScormArchiveError(INVALID_SCORM_ARCHIVE, "not a ZIP archive")
    try:
        return zipfile.ZipFile(io.BytesIO(archive_bytes))
    except zipfile.BadZipFile as exc:
        raise InvalidScormArchiveError(INVALID_SCORM_ARCHIVE, str(exc)) from exc


def list_archive_files(archive_bytes: bytes) -> set[str]:
    """Names of the regular files in the archive."""
    with _open(archive_bytes) as zf:
        return {info.filename for info in zf.infolist() if not info.is_dir()}


def read_manifest(archive_bytes: bytes, *, max_uncompressed_bytes: int | None = None) -> bytes:
    """Return the raw bytes of the root-level ``imsmanifest.xml``."""
    with _open(archive_bytes) as zf:
        infos = zf.infolist()
        if max_uncompressed_bytes is not None:
            total = sum(info.file_size for info in infos)
            if total > max_uncompressed_bytes:
                raise InvalidScormArchiveError(
                    INVALID_SCORM_ARCHIVE,
                    f"uncompressed size {total} exceeds {max_uncompressed_bytes}",
                )

        for info in infos:
            if not info.is_dir() and info.filename.lower() == MANIFEST_NAME:
                try:
                    return zf.read(info)
                except (zipfile.BadZipFile, OSError) as exc:
                    raise InvalidScormArchiveError(CANNOT_LOAD_IMSMANIFEST, str(exc)) from exc

    raise InvalidScormArchiveError(CANNOT_LOAD_IMSMANIFEST, f"{MANIFEST_NAME} not found at archive root")
