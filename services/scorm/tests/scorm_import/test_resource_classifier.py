import pytest

from app.scorm_import.classifier import ResourceClassifier, ResourceKind, href_extension
from app.scorm_import.context import ParseContext
from app.scorm_import.document import ManifestDocument

from manifest_builders import resource, resources, scorm12_manifest, scorm2004_manifest


def _classifier(xml: str) -> tuple[ResourceClassifier, dict]:
    ctx = ParseContext.for_document(ManifestDocument.from_bytes(xml))
    classifier = ResourceClassifier(ctx)
    by_id = {node.attr("identifier"): node for node in ctx.document.resources()}
    return classifier, by_id


@pytest.mark.parametrize(
    ("href", "expected"),
    [
        ("index.html", "html"),
        ("Index.HTM?lang=en#top", "htm"),
        ("content/page.xhtml", "xhtml"),
        ("data/manifest.xml", "xml"),
        ("doc.pdf", "pdf"),
        ("noextension", ""),
        (None, ""),
    ],
)
def test_href_extension(href, expected) -> None:
    assert href_extension(href) == expected


def test_12_uses_lowercase_scormtype() -> None:
    classifier, by_id = _classifier(scorm12_manifest(resources(
        resource("SCO", "a.pdf", scorm_type="sco"),
        resource("ASSET", "b.html", scorm_type="asset"),
        resource("UPPER", "c.pdf", scorm_type=" SCO "),
    )))
    assert classifier.classify(by_id["SCO"]) is ResourceKind.SCO
    assert classifier.classify(by_id["ASSET"]) is ResourceKind.ASSET
    assert classifier.is_sco(by_id["UPPER"])


def test_2004_uses_camel_case_scorm_type() -> None:
    classifier, by_id = _classifier(scorm2004_manifest(resources(
        resource("SCO", "a.pdf", scorm_type="sco", type_attr="adlcp:scormType"),
        resource("ASSET", "b.html", scorm_type="asset", type_attr="adlcp:scormType"),
    )))
    assert classifier.classify(by_id["SCO"]) is ResourceKind.SCO
    assert classifier.classify(by_id["ASSET"]) is ResourceKind.ASSET


def test_attribute_spelling_follows_the_detected_version() -> None:
    # Each version ignores the other's spelling and falls back on the href.
    classifier_12, by_id_12 = _classifier(scorm12_manifest(resources(
        resource("R", "doc.pdf", scorm_type="sco", type_attr="adlcp:scormType"),
    )))
    classifier_2004, by_id_2004 = _classifier(scorm2004_manifest(resources(
        resource("R", "doc.pdf", scorm_type="sco", type_attr="adlcp:scormtype"),
    )))
    assert classifier_12.classify(by_id_12["R"]) is ResourceKind.ASSET
    assert classifier_2004.classify(by_id_2004["R"]) is ResourceKind.ASSET


def test_missing_type_is_inferred_from_href() -> None:
    classifier, by_id = _classifier(scorm12_manifest(resources(
        resource("PAGE", "start.htm", scorm_type=None),
        resource("PDF", "guide.pdf", scorm_type=None),
        resource("BOGUS", "x.html", scorm_type="lesson"),
        resource("NOHREF", None, scorm_type=None),
    )))
    assert classifier.classify(by_id["PAGE"]) is ResourceKind.SCO
    assert classifier.classify(by_id["PDF"]) is ResourceKind.ASSET
    assert classifier.classify(by_id["BOGUS"]) is ResourceKind.SCO
    assert classifier.classify(by_id["NOHREF"]) is ResourceKind.ASSET
    assert classifier.ctx.recorded.codes.count("resource_type_inferred") == 4


def test_classification_is_cached_per_resource() -> None:
    classifier, by_id = _classifier(scorm12_manifest(resources(resource("PAGE", "a.html", scorm_type=None))))
    classifier.classify(by_id["PAGE"])
    classifier.classify(by_id["PAGE"])
    assert classifier.ctx.recorded.codes.count("resource_type_inferred") == 1
