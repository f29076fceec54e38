import xml.etree.ElementTree as ET

from app.scorm_import.context import ParseContext
from app.scorm_import.parser import parse_manifest
from app.scorm_import.document import ManifestDocument, ManifestNode
from app.scorm_import.namespaces import (
    ADLCP_V1P2_NS,
    ADLCP_V1P3_NS,
    IMSCP_NS,
    IMSSS_NS,
    NamespaceMap,
    resolve_namespaces,
)

from manifest_builders import IMSCP_12_NS, scorm12_manifest, scorm2004_manifest


def test_bindings_of_a_12_manifest() -> None:
    namespaces = resolve_namespaces(ManifestDocument.from_bytes(scorm12_manifest("")))
    assert namespaces.get("") == IMSCP_12_NS
    assert namespaces.get("adlcp") == ADLCP_V1P2_NS
    assert namespaces.get("imsss") is None


def test_well_known_defaults_fill_missing_prefixes() -> None:
    namespaces = resolve_namespaces(ManifestDocument.from_bytes(scorm12_manifest("")))
    assert namespaces.uri_for("imsss") == IMSSS_NS
    assert namespaces.uri_for("adlcp") == ADLCP_V1P2_NS
    assert namespaces.uri_for("unknown") is None


def test_adlcp_uris_cover_both_editions_and_declared() -> None:
    namespaces = NamespaceMap({"adlcp": "urn:custom-adlcp"})
    assert namespaces.adlcp_uris() == {ADLCP_V1P2_NS, ADLCP_V1P3_NS, "urn:custom-adlcp"}
    assert namespaces.imsss_uris() == {IMSSS_NS}


def test_2004_bindings() -> None:
    namespaces = resolve_namespaces(ManifestDocument.from_bytes(scorm2004_manifest("")))
    assert namespaces.as_dict()[""] == IMSCP_NS
    assert namespaces.get("imsss") == IMSSS_NS


def test_malformed_binding_is_reported_and_mapping_is_partial() -> None:
    document = ManifestDocument(
        root=ManifestNode(ET.fromstring('<manifest identifier="M"/>')),
        root_namespaces=[("", IMSCP_NS), ("adlcp", ""), ("imsss", IMSSS_NS)],
    )
    ctx = ParseContext(document=document)

    namespaces = resolve_namespaces(document, ctx)

    assert namespaces.as_dict() == {"": IMSCP_NS, "imsss": IMSSS_NS}
    assert ctx.recorded.codes == ["namespace_extraction_failed"]
    assert ctx.recorded.events[0].level == "warning"


def test_unset_default_namespace_keeps_later_bindings() -> None:
    document = ManifestDocument.from_bytes(
        b'<manifest identifier="M" xmlns="" xmlns:adlcp="urn:custom-adlcp" xmlns:imsss="urn:x"/>'
    )
    ctx = ParseContext(document=document)

    namespaces = resolve_namespaces(document, ctx)

    assert namespaces.get("adlcp") == "urn:custom-adlcp"
    assert namespaces.get("imsss") == "urn:x"
    assert namespaces.get("") is None
    assert "urn:custom-adlcp" in namespaces.adlcp_uris()
    assert ctx.recorded.codes == []


def test_custom_adlcp_uri_still_drives_overrides() -> None:
    xml = (
        '<manifest identifier="M" version="1.2" xmlns="" xmlns:adlcp="urn:custom-adlcp">'
        '<organizations default="O"><organization identifier="O">'
        '<item identifier="A" identifierref="R"><adlcp:masteryscore>90</adlcp:masteryscore></item>'
        '</organization></organizations>'
        '<resources><resource identifier="R" adlcp:scormtype="sco" href="a.pdf"/></resources>'
        "</manifest>"
    )
    (unit,) = parse_manifest(xml).scos
    assert unit.score_to_pass_int == 90
    assert unit.entry_url == "a.pdf"
