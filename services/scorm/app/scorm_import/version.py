"""SCORM version detection."""

from __future__ import annotations

import enum

from app.exceptions import InvalidScormArchiveError
from app.scorm_import.document import ManifestDocument
from app.scorm_import.messages import INVALID_SCORM_VERSION
from app.scorm_import.namespaces import ADLCP_V1P3_NS, XSI_NS, NamespaceMap, resolve_namespaces


class ScormVersion(str, enum.Enum):
    SCORM_12 = "1.2"
    SCORM_2004_2ND = "2004_2nd"
    SCORM_2004_3RD = "2004_3rd"
    SCORM_2004_4TH = "2004_4th"
    SCORM_2004 = "2004"

    @property
    def is_2004(self) -> bool:
        return self is not ScormVersion.SCORM_12

    @classmethod
    def parse(cls, value: str) -> ScormVersion:
        try:
            return cls(value)
        except ValueError as exc:
            raise InvalidScormArchiveError(INVALID_SCORM_VERSION, repr(value)) from exc


def detect_version(document: ManifestDocument, namespaces: NamespaceMap | None = None) -> ScormVersion:
    """Classify the package.

    Order: schemaLocation 2004 markers, schemaLocation 1.2 markers, the
    ``version`` attribute, then presence of any element in the 2004 ADLCP
    namespace.

    ``schemaLocation`` is read under the URI the manifest binds to ``xsi``
    (older 1.2 packages use the 2000/10 schema-instance URI), then under the
    standard URI, then unqualified.
    """
    root = document.root
    xsi = (namespaces or resolve_namespaces(document)).uri_for("xsi")
    schema_location = (
        root.attr("schemaLocation", xsi)
        or root.attr("schemaLocation", XSI_NS)
        or root.attr("schemaLocation")
        or ""
    )

    if "2004" in schema_location or "v1p3" in schema_location:
        if "4th" in schema_location or "CAM_v1p1" in schema_location:
            return ScormVersion.SCORM_2004_4TH
        if "3rd" in schema_location:
            return ScormVersion.SCORM_2004_3RD
        return ScormVersion.SCORM_2004_2ND

    if "1.2" in schema_location or "v1p2" in schema_location:
        return ScormVersion.SCORM_12

    if (root.attr("version") or "").strip() == "1.2":
        return ScormVersion.SCORM_12

    if any(node.namespace == ADLCP_V1P3_NS for node in root.iter()):
        return ScormVersion.SCORM_2004
    return ScormVersion.SCORM_12
