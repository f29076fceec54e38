"""
SCORM import: controller layer.

Receives raw request bodies from the router, calls the parser and service
functions, composes the response.
"""
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from app.exceptions import PackageTooLarge, ScormPackageNotFound
from app.scorm_import import service
from app.scorm_import.parser import ScormManifest, parse_manifest
from app.scorm_import.schemas import (
    EventResponse,
    ManifestResponse,
    PackageResponse,
    ScoResponse,
)
from app.scorm_import.units import ContentUnit

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from app.config import Settings
    from app.models.scorm_package import ScormPackage


def _sco_tree(units: list[ContentUnit]) -> list[ScoResponse]:
    return [ScoResponse.model_validate(unit.to_dict()) for unit in units]


def _manifest_response(manifest: ScormManifest) -> ManifestResponse:
    return ManifestResponse(
        identifier=manifest.identifier,
        title=manifest.title,
        version=manifest.version,
        schema_version=manifest.schema_version,
        organization=manifest.organization,
        entry_point=manifest.entry_point,
        scos=_sco_tree(manifest.scos),
        events=[
            EventResponse(code=event.code, level=event.level, message=event.message)
            for event in manifest.events
            if event.level in ("warning", "error")
        ],
    )


def _package_response(package: ScormPackage, scos: list[ContentUnit]) -> PackageResponse:
    return PackageResponse(
        package_id=package.package_id,
        resource_type=package.resource_type,
        resource_id=package.resource_id,
        identifier=package.identifier,
        title=package.title,
        origin_file=package.origin_file,
        version=package.version,
        entry_url=package.entry_url,
        metadata=package.package_metadata,
        created_at=package.created_at,
        scos=_sco_tree(scos),
    )


def _check_size(body: bytes, settings: Settings) -> None:
    if len(body) > settings.max_package_bytes:
        raise PackageTooLarge(settings.max_package_bytes // (1024 * 1024))


async def parse_manifest_document(body: bytes, settings: Settings) -> ManifestResponse:
    """Resolve a bare imsmanifest.xml without storing anything."""
    _check_size(body, settings)
    return _manifest_response(parse_manifest(body))


async def import_package(
    body: bytes,
    *,
    resource_type: str,
    resource_id: str,
    filename: str | None,
    db: AsyncSession,
    settings: Settings,
) -> PackageResponse:
    _check_size(body, settings)
    package, manifest = await service.import_scorm_package(
        db,
        body,
        resource_type=resource_type,
        resource_id=resource_id,
        origin_file=filename,
        max_uncompressed_bytes=settings.max_uncompressed_bytes,
    )
    return _package_response(package, manifest.scos)


async def get_package(package_id: uuid.UUID, db: AsyncSession) -> PackageResponse:
    package = await service.get_package(db, package_id)
    if package is None:
        raise ScormPackageNotFound(str(package_id))
    scos = await service.load_sco_tree(db, package_id)
    return _package_response(package, scos)
