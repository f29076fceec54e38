"""Namespace bindings declared on the manifest root."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.scorm_import.context import ParseContext
    from app.scorm_import.document import ManifestDocument

IMSCP_NS = "http://www.imsglobal.org/xsd/imscp_v1p1"
ADLCP_V1P2_NS = "http://www.adlnet.org/xsd/adlcp_rootv1p2"
ADLCP_V1P3_NS = "http://www.adlnet.org/xsd/adlcp_v1p3"
IMSSS_NS = "http://www.imsglobal.org/xsd/imsss"
ADLNAV_NS = "http://www.adlnet.org/xsd/adlnav_v1p3"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"

# Used when the manifest does not bind the prefix itself.
DEFAULT_URIS = {
    "adlcp": ADLCP_V1P3_NS,
    "imsss": IMSSS_NS,
    "adlnav": ADLNAV_NS,
    "xsi": XSI_NS,
}


class NamespaceMap:
    """Prefix to URI mapping with well-known fallbacks."""

    def __init__(self, bindings: dict[str, str] | None = None):
        self.bindings = dict(bindings or {})

    def __repr__(self) -> str:
        return f"NamespaceMap({self.bindings!r})"

    def get(self, prefix: str) -> str | None:
        return self.bindings.get(prefix)

    def uri_for(self, prefix: str) -> str | None:
        """Declared URI for ``prefix``, else its well-known default."""
        return self.bindings.get(prefix) or DEFAULT_URIS.get(prefix)

    def adlcp_uris(self) -> set[str]:
        """Every URI an ``adlcp:`` name may live under in this manifest."""
        uris = {ADLCP_V1P2_NS, ADLCP_V1P3_NS}
        declared = self.bindings.get("adlcp")
        if declared:
            uris.add(declared)
        return uris

    def imsss_uris(self) -> set[str]:
        uris = {IMSSS_NS}
        declared = self.bindings.get("imsss")
        if declared:
            uris.add(declared)
        return uris

    def as_dict(self) -> dict[str, str]:
        return dict(self.bindings)


def resolve_namespaces(document: ManifestDocument, ctx: ParseContext | None = None) -> NamespaceMap:
    """Collect the prefix bindings declared on the document root.

    ``xmlns=""`` only unsets the default namespace. Any other malformed
    binding is reported and skipped; the remaining bindings are kept.
    """
    bindings: dict[str, str] = {}
    for binding in document.root_namespaces:
        try:
            prefix, uri = binding
            if not isinstance(uri, str) or (prefix and not uri):
                raise ValueError(f"invalid namespace binding for prefix {prefix!r}")
        except (TypeError, ValueError) as exc:
            if ctx is not None:
                ctx.emit(
                    "namespace_extraction_failed",
                    f"Skipping namespace binding: {exc}",
                    level="warning",
                    binding=repr(binding),
                )
            continue
        if uri:
            bindings[prefix or ""] = uri
    return NamespaceMap(bindings)
