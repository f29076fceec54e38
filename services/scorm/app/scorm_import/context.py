"""Per-parse state shared by the import components."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from app.scorm_import.document import ManifestDocument
from app.scorm_import.events import CollectingEventSink, EventSink, ImportEvent
from app.scorm_import.namespaces import NamespaceMap, resolve_namespaces
from app.scorm_import.version import ScormVersion, detect_version

logger = logging.getLogger(__name__)


@dataclass
class ParseContext:
    """Everything one manifest parse needs. Never shared between parses."""

    document: ManifestDocument
    namespaces: NamespaceMap = field(default_factory=NamespaceMap)
    version: ScormVersion = ScormVersion.SCORM_12
    sink: EventSink | None = None
    recorded: CollectingEventSink = field(default_factory=CollectingEventSink)

    @classmethod
    def for_document(cls, document: ManifestDocument, sink: EventSink | None = None) -> ParseContext:
        ctx = cls(document=document, sink=sink)
        ctx.namespaces = resolve_namespaces(document, ctx)
        ctx.version = detect_version(document, ctx.namespaces)
        ctx.emit(
            "version_detected",
            f"Detected SCORM {ctx.version.value}",
            level="debug",
            version=ctx.version.value,
        )
        return ctx

    def emit(self, code: str, message: str = "", *, level: str = "info", **context: Any) -> None:
        event = ImportEvent(code=code, level=level, message=message, context=context)
        self.recorded.emit(event)
        if self.sink is None:
            return
        try:
            self.sink.emit(event)
        except Exception:
            logger.exception("Event sink failed for %s", code)
