from __future__ import annotations

import io
import tarfile
import zipfile
from pathlib import Path

import pytest

from student_import.services.archive import ArchiveError, content_type_for, extract_archive


def _zip(path: Path, entries: dict[str, bytes]) -> Path:
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("docs/", b"")
        for name, data in entries.items():
            zf.writestr(name, data)
    return path


def test_extract_zip_skips_metadata(tmp_path: Path):
    path = _zip(tmp_path / "docs.zip", {
        "docs/STU-2025-00001_photo.JPG": b"jpg",
        "docs/5_marks.pdf": b"pdf",
        "__MACOSX/docs/._5_marks.pdf": b"fork",
        "docs/.DS_Store": b"junk",
        "notes.txt": b"txt",
    })
    files = extract_archive(path)
    assert [f.name for f in files] == ["STU-2025-00001_photo.JPG", "5_marks.pdf", "notes.txt"]
    assert [f.content_type for f in files] == [
        "image/jpeg", "application/pdf", "application/octet-stream",
    ]
    assert files[1].content == b"pdf"


def test_extract_tar(tmp_path: Path):
    path = tmp_path / "docs.tar.gz"
    with tarfile.open(path, "w:gz") as tf:
        for name, data in {"a/12_birth.pdf": b"pdf", "a/.hidden.png": b"x"}.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tf.addfile(info, io.BytesIO(data))
    files = extract_archive(path)
    assert [f.name for f in files] == ["12_birth.pdf"]


def test_corrupt_or_missing_archive(tmp_path: Path):
    bad = tmp_path / "bad.zip"
    bad.write_bytes(b"definitely not an archive")
    with pytest.raises(ArchiveError):
        extract_archive(bad)
    with pytest.raises(ArchiveError):
        extract_archive(tmp_path / "missing.zip")


def test_content_type_for():
    assert content_type_for("x.DOCX").startswith("application/vnd.openxmlformats")
    assert content_type_for("x.gif") == "image/gif"
    assert content_type_for("noext") == "application/octet-stream"
