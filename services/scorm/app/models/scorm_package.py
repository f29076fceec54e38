import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Enum as SAEnum, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from shared.database.postgres import Base

from app.scorm_import.version import ScormVersion


class ScormPackage(Base):
    """An imported SCORM package owned by some other record (course, lesson...)."""

    __tablename__ = "scorm_packages"

    package_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Polymorphic owner
    resource_type: Mapped[str] = mapped_column(String(100), nullable=False)
    resource_id: Mapped[str] = mapped_column(String(100), nullable=False)

    identifier: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    origin_file: Mapped[str | None] = mapped_column(String(500), nullable=True)
    version: Mapped[ScormVersion] = mapped_column(
        SAEnum(ScormVersion, name="scorm_version", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    entry_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    # Schema version, organization, namespaces, recoverable event codes
    package_metadata: Mapped[dict | None] = mapped_column("metadata", JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("ix_scorm_packages_resource", "resource_type", "resource_id"),
    )

    def get_metadata(self, key: str, default=None):
        return (self.package_metadata or {}).get(key, default)

    def __repr__(self) -> str:
        return f"<ScormPackage {self.package_id} identifier={self.identifier} version={self.version}>"
