import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from app.config import Settings
from app.database import init_db
from app.exceptions import InvalidScormArchiveError
from app.scorm_import.messages import get_message
from app.scorm_import.router import router as scorm_router
from shared.middleware.error_handler import error_envelope, error_envelope_middleware
from shared.middleware.request_id import request_id_middleware


# ── OpenAPI metadata ──────────────────────────────────────────────────────────

_DESCRIPTION = """
## Docfliq SCORM Import Service

Resolves SCORM 1.2 and 2004 packages into a tree of launchable content units.

* **Parse**: post a bare `imsmanifest.xml` and get back the detected version and SCO tree.
* **Import**: post a SCORM ZIP; the package and its SCO tree are stored against an owner record.
* **Read**: fetch a stored package with its tree, in original sibling order.

Manifests with no usable organization are rebuilt from their resources, and
single-page organizations are repaired when the package holds more SCOs.

### Error shape
Invalid packages return HTTP 422 with a consistent JSON envelope:
```json
{ "error": { "code": "cannot_load_imsmanifest", "message": "..." }, "request_id": "..." }
```
"""

_TAGS_METADATA = [
    {
        "name": "scorm",
        "description": "Parse SCORM manifests and import SCORM packages.",
    },
]


# ── Health schema ─────────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    service: str


# ── App factory ───────────────────────────────────────────────────────────────

def get_settings() -> Settings:
    return Settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    init_db(settings.scorm_database_url)
    yield


async def invalid_scorm_archive_handler(request: Request, exc: InvalidScormArchiveError):
    return error_envelope(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        exc.key,
        get_message(exc.key),
    )


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(levelname)s:%(name)s: %(message)s",
    )

    app = FastAPI(
        title="Docfliq SCORM Import Service",
        version="1.0.0",
        description=_DESCRIPTION,
        openapi_tags=_TAGS_METADATA,
        contact={
            "name": "Docfliq Engineering",
            "email": "engineering@docfliq.com",
        },
        license_info={
            "name": "Proprietary",
        },
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_exception_handler(InvalidScormArchiveError, invalid_scorm_archive_handler)

    # Middleware (applied in reverse-registration order: last added = outermost)
    app.middleware("http")(request_id_middleware)
    app.middleware("http")(error_envelope_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    app.include_router(scorm_router, prefix="/api/v1")

    @app.get("/health", response_model=HealthResponse, tags=["health"], include_in_schema=True)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service="scorm")

    return app


app = create_app()
