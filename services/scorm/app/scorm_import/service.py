"""SCORM package import: reads the manifest out of an uploaded ZIP, resolves
the SCO tree and stores package + tree rows.

Zero FastAPI imports. Receives the session via parameters.
"""

from __future__ import annotations

import logging
import posixpath
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.scorm_package import ScormPackage
from app.models.scorm_sco import ScormSco
from app.scorm_import.archive import list_archive_files, read_manifest
from app.scorm_import.events import EventSink, FanOutEventSink, ImportEvent, LoggingEventSink
from app.scorm_import.parser import ScormManifest, parse_manifest
from app.scorm_import.units import UNIT_FIELDS, ContentUnit

logger = logging.getLogger(__name__)


async def import_scorm_package(
    db: AsyncSession,
    archive_bytes: bytes,
    *,
    resource_type: str,
    resource_id: str,
    origin_file: str | None = None,
    max_uncompressed_bytes: int | None = None,
    events: EventSink | None = None,
) -> tuple[ScormPackage, ScormManifest]:
    """Read, parse and persist a SCORM ZIP. Raises ``InvalidScormArchiveError``."""
    manifest_bytes = read_manifest(archive_bytes, max_uncompressed_bytes=max_uncompressed_bytes)
    sink = FanOutEventSink(LoggingEventSink(logger), events) if events is not None else LoggingEventSink(logger)
    manifest = parse_manifest(manifest_bytes, events=sink)

    missing = missing_entry_urls(manifest, list_archive_files(archive_bytes))
    for entry_url in sorted(missing):
        event = ImportEvent(
            code="entry_url_not_in_archive",
            level="warning",
            message=f"Entry URL {entry_url!r} is not in the archive",
            context={"entry_url": entry_url},
        )
        sink.emit(event)
        manifest.events.append(event)

    package = await save_scorm_package(
        db,
        manifest,
        resource_type=resource_type,
        resource_id=resource_id,
        origin_file=origin_file,
        extra_metadata={"missing_entry_urls": sorted(missing)} if missing else None,
    )
    logger.info(
        "SCORM import completed for %s:%s (package %s, %s)",
        resource_type, resource_id, package.package_id, manifest.version.value,
    )
    return package, manifest


def missing_entry_urls(manifest: ScormManifest, archive_files: set[str]) -> set[str]:
    """Entry URLs whose file (query string stripped) is not in the archive."""
    missing = set()
    for unit in manifest.iter_units():
        if unit.entry_url is None:
            continue
        path = posixpath.normpath(unit.entry_url.split("?", 1)[0].split("#", 1)[0])
        if path not in archive_files:
            missing.add(unit.entry_url)
    return missing


async def save_scorm_package(
    db: AsyncSession,
    manifest: ScormManifest,
    *,
    resource_type: str,
    resource_id: str,
    origin_file: str | None = None,
    extra_metadata: dict | None = None,
) -> ScormPackage:
    """Insert the package row and one row per unit, parents before children."""
    metadata = {
        "schema_version": manifest.schema_version,
        "default_org": manifest.default_org,
        "organization": manifest.organization,
        "namespaces": manifest.namespaces,
        "events": sorted({event.code for event in manifest.events if event.level in ("warning", "error")}),
    }
    if extra_metadata:
        metadata.update(extra_metadata)

    package = ScormPackage(
        resource_type=resource_type,
        resource_id=resource_id,
        identifier=manifest.identifier,
        title=manifest.title,
        origin_file=origin_file,
        version=manifest.version,
        entry_url=manifest.entry_point,
        package_metadata=metadata,
    )
    db.add(package)
    await db.flush()

    for sort_order, root in enumerate(manifest.scos):
        _add_sco_rows(db, package.package_id, root, parent_id=None, sort_order=sort_order)
    await db.flush()
    return package


def _add_sco_rows(
    db: AsyncSession,
    package_id: uuid.UUID,
    unit: ContentUnit,
    *,
    parent_id: uuid.UUID | None,
    sort_order: int,
) -> None:
    row = ScormSco(
        sco_id=unit.uuid,
        package_id=package_id,
        parent_id=parent_id,
        sort_order=sort_order,
        **{name: getattr(unit, name) for name in UNIT_FIELDS},
    )
    db.add(row)
    for child_order, child in enumerate(unit.children):
        _add_sco_rows(db, package_id, child, parent_id=unit.uuid, sort_order=child_order)


async def get_package(db: AsyncSession, package_id: uuid.UUID) -> ScormPackage | None:
    result = await db.execute(
        select(ScormPackage).where(ScormPackage.package_id == package_id)
    )
    return result.scalar_one_or_none()


async def load_sco_tree(db: AsyncSession, package_id: uuid.UUID) -> list[ContentUnit]:
    """Rebuild the stored forest, preserving sibling order and parent links."""
    result = await db.execute(
        select(ScormSco)
        .where(ScormSco.package_id == package_id)
        .order_by(ScormSco.sort_order)
    )
    rows = list(result.scalars().all())

    units = {
        row.sco_id: ContentUnit(uuid=row.sco_id, **{name: getattr(row, name) for name in UNIT_FIELDS})
        for row in rows
    }
    roots = []
    # Rows are sorted by sort_order, so appending keeps sibling order.
    for row in rows:
        unit = units[row.sco_id]
        if row.parent_id is None:
            roots.append(unit)
        else:
            units[row.parent_id].add_child(unit)
    return roots
