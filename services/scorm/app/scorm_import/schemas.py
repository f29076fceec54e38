"""
SCORM import: Pydantic V2 response schemas.
"""
from __future__ import annotations

from uuid import UUID
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.scorm_import.units import TimeLimitAction
from app.scorm_import.version import ScormVersion


# ── Base ─────────────────────────────────────────────────────────────────────

class _Base(BaseModel):
    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra="forbid",
    )


# ── Tree ─────────────────────────────────────────────────────────────────────

class ScoResponse(_Base):
    """One node of the resolved SCO tree."""
    model_config = ConfigDict(from_attributes=True, extra="forbid", str_strip_whitespace=False)

    uuid: UUID
    identifier: str
    resource_identifier: str | None = None
    is_block: bool
    title: str
    visible: bool = True
    parameters: str | None = None
    entry_url: str | None = None
    score_to_pass_int: int | None = None
    score_to_pass_decimal: float | None = None
    completion_threshold: float | None = None
    max_time_allowed: str | None = None
    time_limit_action: TimeLimitAction | None = None
    launch_data: str | None = None
    prerequisites: str | None = None
    choice_enabled: bool | None = None
    flow_enabled: bool | None = None
    tracked: bool | None = None
    completion_set_by_content: bool | None = None
    children: list[ScoResponse] = Field(default_factory=list)


class EventResponse(_Base):
    code: str
    level: str
    message: str


class ManifestResponse(_Base):
    """Result of parsing a manifest without storing it."""
    identifier: str
    title: str
    version: ScormVersion
    schema_version: str | None = None
    organization: str | None = None
    entry_point: str | None = None
    scos: list[ScoResponse]
    events: list[EventResponse] = Field(
        default_factory=list, description="Recoverable warnings and errors met while parsing",
    )


class PackageResponse(_Base):
    """A stored SCORM package and its SCO tree."""
    model_config = ConfigDict(from_attributes=True, extra="forbid")

    package_id: UUID
    resource_type: str
    resource_id: str
    identifier: str
    title: str
    origin_file: str | None = None
    version: ScormVersion
    entry_url: str | None = None
    metadata: dict | None = None
    created_at: datetime
    scos: list[ScoResponse] = Field(default_factory=list)
