from __future__ import annotations

import logging
import tarfile
import zipfile
from pathlib import Path, PurePosixPath

from ..models.file_match import DocumentFile

"""Archive extraction for the document intake step.

Zip and tar containers are read fully into memory; every regular file becomes
a DocumentFile named by its basename. Directory entries, macOS resource forks
(__MACOSX/) and dot-files are skipped.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ArchiveError",
    "CONTENT_TYPES",
    "DEFAULT_CONTENT_TYPE",
    "content_type_for",
    "extract_archive",
]

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES: dict[str, str] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


class ArchiveError(Exception):
    """Raised when the archive cannot be opened or read."""


def content_type_for(filename: str) -> str:
    suffix = PurePosixPath(filename).suffix.lower().lstrip(".")
    return CONTENT_TYPES.get(suffix, DEFAULT_CONTENT_TYPE)


def _skip(entry_name: str) -> bool:
    if entry_name.startswith("__MACOSX"):
        return True
    base = PurePosixPath(entry_name).name
    return not base or base.startswith(".")


def _document(entry_name: str, content: bytes) -> DocumentFile:
    base = PurePosixPath(entry_name).name
    return DocumentFile(name=base, content=content, content_type=content_type_for(base))


def _extract_zip(path: Path) -> list[DocumentFile]:
    files: list[DocumentFile] = []
    with zipfile.ZipFile(path) as zf:
        for info in zf.infolist():
            if info.is_dir() or _skip(info.filename):
                continue
            files.append(_document(info.filename, zf.read(info)))
    return files


def _extract_tar(path: Path) -> list[DocumentFile]:
    files: list[DocumentFile] = []
    with tarfile.open(path) as tf:
        for member in tf.getmembers():
            if not member.isfile() or _skip(member.name):
                continue
            fh = tf.extractfile(member)
            if fh is None:
                continue
            with fh:
                files.append(_document(member.name, fh.read()))
    return files


def extract_archive(path: Path) -> list[DocumentFile]:
    """Extract every document from a .zip / .tar(.gz) archive, in archive order.

    Raises:
        ArchiveError: missing, corrupt or unsupported archive
    """
    if not path.exists():
        raise ArchiveError(f"archive not found: {path}")
    try:
        if zipfile.is_zipfile(path):
            files = _extract_zip(path)
        elif tarfile.is_tarfile(path):
            files = _extract_tar(path)
        else:
            raise ArchiveError(f"unsupported archive format: {path.name}")
    except ArchiveError:
        raise
    except (zipfile.BadZipFile, tarfile.TarError, OSError) as e:
        raise ArchiveError(f"failed to read archive {path.name}: {e}") from e

    logger.info("extracted archive=%s files=%d", path.name, len(files))
    return files
