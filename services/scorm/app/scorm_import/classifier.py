"""Launchable (SCO) vs asset classification of ``<resource>`` nodes."""

from __future__ import annotations

import enum
import posixpath

from app.scorm_import.context import ParseContext
from app.scorm_import.document import ManifestNode
from app.scorm_import.namespaces import ADLCP_V1P2_NS, ADLCP_V1P3_NS

# A resource with no usable type attribute is launchable when its href
# points at one of these.
LAUNCHABLE_EXTENSIONS = frozenset({"html", "htm", "xhtml", "xml"})


class ResourceKind(str, enum.Enum):
    SCO = "sco"
    ASSET = "asset"


def href_extension(href: str | None) -> str:
    """Lower-cased extension of ``href`` without query or fragment."""
    if not href:
        return ""
    path = href.split("#", 1)[0].split("?", 1)[0]
    return posixpath.splitext(path)[1].lstrip(".").lower()


class ResourceClassifier:
    def __init__(self, ctx: ParseContext):
        self.ctx = ctx
        self._kinds: dict[ManifestNode, ResourceKind] = {}

    def declared_type(self, resource: ManifestNode) -> str | None:
        """The raw scorm type attribute, looked up the way the version dictates."""
        if self.ctx.version.is_2004:
            lookups = [
                ("scormType", ADLCP_V1P3_NS),
                ("scormType", ADLCP_V1P2_NS),
                ("scormType", None),
            ]
        else:
            lookups = [
                ("scormtype", None),
                ("scormtype", ADLCP_V1P2_NS),
            ]
            declared = self.ctx.namespaces.get("adlcp")
            if declared and declared != ADLCP_V1P2_NS:
                lookups.append(("scormtype", declared))

        for name, namespace in lookups:
            value = resource.attr(name, namespace)
            if value is not None:
                return value
        return None

    def classify(self, resource: ManifestNode) -> ResourceKind:
        if resource not in self._kinds:
            self._kinds[resource] = self._classify(resource)
        return self._kinds[resource]

    def _classify(self, resource: ManifestNode) -> ResourceKind:
        raw = self.declared_type(resource)
        value = (raw or "").strip().lower()
        if value == ResourceKind.SCO.value:
            return ResourceKind.SCO
        if value == ResourceKind.ASSET.value:
            return ResourceKind.ASSET

        href = resource.attr("href")
        kind = ResourceKind.SCO if href_extension(href) in LAUNCHABLE_EXTENSIONS else ResourceKind.ASSET
        self.ctx.emit(
            "resource_type_inferred",
            f"Resource has no recognizable scorm type, inferred {kind.value} from href",
            level="debug",
            identifier=resource.attr("identifier"),
            declared=raw,
            href=href,
        )
        return kind

    def is_sco(self, resource: ManifestNode) -> bool:
        return self.classify(resource) is ResourceKind.SCO
