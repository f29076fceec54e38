"""
SCORM import: HTTP routes.

Manifests and packages are sent as the raw request body, not as multipart
form data.
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.database import get_db
from app.scorm_import import controller
from app.scorm_import.schemas import ManifestResponse, PackageResponse

router = APIRouter(prefix="/scorm", tags=["scorm"])


def _get_settings() -> Settings:
    return Settings()


@router.post(
    "/manifests/parse",
    response_model=ManifestResponse,
    summary="Resolve a manifest into its SCO tree",
    description=(
        "Accepts the bytes of an imsmanifest.xml and returns the detected "
        "SCORM version, the resolved SCO tree and any recoverable warnings. "
        "Nothing is stored."
    ),
)
async def parse_manifest(
    request: Request,
    settings: Settings = Depends(_get_settings),
) -> ManifestResponse:
    body = await request.body()
    return await controller.parse_manifest_document(body, settings)


@router.post(
    "/packages",
    response_model=PackageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Import a SCORM ZIP package",
    description=(
        "Accepts the bytes of a SCORM ZIP, resolves its manifest and stores "
        "the package together with its SCO tree against the given resource."
    ),
)
async def import_package(
    request: Request,
    resource_type: str = Query(..., min_length=1, max_length=100),
    resource_id: str = Query(..., min_length=1, max_length=100),
    filename: str | None = Query(default=None, max_length=500),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(_get_settings),
) -> PackageResponse:
    body = await request.body()
    return await controller.import_package(
        body,
        resource_type=resource_type,
        resource_id=resource_id,
        filename=filename,
        db=db,
        settings=settings,
    )


@router.get(
    "/packages/{package_id}",
    response_model=PackageResponse,
    summary="Get a stored package and its SCO tree",
)
async def get_package(
    package_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> PackageResponse:
    return await controller.get_package(package_id, db)
