import uuid

from sqlalchemy import (
    Boolean,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from shared.database.postgres import Base

from app.scorm_import.units import TimeLimitAction


class ScormSco(Base):
    """One node of a package's SCO tree. ``sco_id`` is the unit's process UUID."""

    __tablename__ = "scorm_scos"

    sco_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    package_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("scorm_packages.package_id", ondelete="CASCADE"),
        nullable=False,
    )
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("scorm_scos.sco_id", ondelete="CASCADE"),
        nullable=True,
    )
    # Position among siblings
    sort_order: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)

    identifier: Mapped[str] = mapped_column(String(255), nullable=False)
    resource_identifier: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_block: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    parameters: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    entry_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    score_to_pass_int: Mapped[int | None] = mapped_column(Integer, nullable=True)
    score_to_pass_decimal: Mapped[float | None] = mapped_column(Float, nullable=True)
    completion_threshold: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_time_allowed: Mapped[str | None] = mapped_column(String(100), nullable=True)
    time_limit_action: Mapped[TimeLimitAction | None] = mapped_column(
        SAEnum(
            TimeLimitAction,
            name="scorm_time_limit_action",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=True,
    )
    launch_data: Mapped[str | None] = mapped_column(Text, nullable=True)
    prerequisites: Mapped[str | None] = mapped_column(Text, nullable=True)

    # SCORM 2004 navigation flags
    choice_enabled: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    flow_enabled: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    tracked: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    completion_set_by_content: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    __table_args__ = (
        Index("ix_scorm_scos_package_identifier", "package_id", "identifier"),
        Index("ix_scorm_scos_package_parent", "package_id", "parent_id"),
    )

    def __repr__(self) -> str:
        return f"<ScormSco {self.identifier} block={self.is_block}>"
