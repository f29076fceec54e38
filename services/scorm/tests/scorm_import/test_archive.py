import pytest

from app.exceptions import InvalidScormArchiveError
from app.scorm_import import messages
from app.scorm_import.archive import list_archive_files, read_manifest
from app.scorm_import.parser import parse_manifest
from app.scorm_import.service import missing_entry_urls

from manifest_builders import (
    build_zip,
    item,
    organization,
    organizations,
    resource,
    resources,
    scorm12_manifest,
)

MANIFEST = scorm12_manifest(
    organizations(organization(item("A", "RA"), item("B", "RB")))
    + resources(resource("RA", "a.html?start=1"), resource("RB", "pages/b.html"))
)


def test_read_manifest_from_root() -> None:
    archive = build_zip({"imsmanifest.xml": MANIFEST, "a.html": "<html/>"})
    assert read_manifest(archive) == MANIFEST.encode("utf-8")


def test_manifest_name_is_case_insensitive() -> None:
    archive = build_zip({"IMSManifest.XML": MANIFEST})
    assert read_manifest(archive) == MANIFEST.encode("utf-8")


def test_nested_manifest_is_not_found() -> None:
    archive = build_zip({"course/imsmanifest.xml": MANIFEST})
    with pytest.raises(InvalidScormArchiveError) as exc_info:
        read_manifest(archive)
    assert exc_info.value.key == messages.CANNOT_LOAD_IMSMANIFEST


def test_not_a_zip() -> None:
    with pytest.raises(InvalidScormArchiveError) as exc_info:
        read_manifest(b"definitely not a zip")
    assert exc_info.value.key == messages.INVALID_SCORM_ARCHIVE


def test_uncompressed_size_limit() -> None:
    archive = build_zip({"imsmanifest.xml": MANIFEST, "big.bin": b"\0" * 10_000})
    with pytest.raises(InvalidScormArchiveError) as exc_info:
        read_manifest(archive, max_uncompressed_bytes=1_000)
    assert exc_info.value.key == messages.INVALID_SCORM_ARCHIVE
    assert read_manifest(archive, max_uncompressed_bytes=1_000_000)


def test_list_archive_files_skips_directories() -> None:
    archive = build_zip({"imsmanifest.xml": MANIFEST, "pages/": "", "pages/b.html": "<html/>"})
    assert list_archive_files(archive) == {"imsmanifest.xml", "pages/b.html"}


def test_missing_entry_urls_ignore_query_strings() -> None:
    manifest = parse_manifest(MANIFEST)
    assert missing_entry_urls(manifest, {"a.html", "pages/b.html"}) == set()
    assert missing_entry_urls(manifest, {"a.html"}) == {"pages/b.html"}
