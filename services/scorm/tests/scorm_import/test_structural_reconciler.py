import pytest

from app.exceptions import InvalidScormArchiveError
from app.scorm_import import messages
from app.scorm_import.parser import parse_manifest
from app.scorm_import.reconciler import (
    DIGIT_IN_IDENTIFIER,
    INDEX_IN_ENTRY_URL,
    LESSON_IN_IDENTIFIER,
    MAIN_IN_ENTRY_URL,
    MAIN_IN_IDENTIFIER,
    MENU_IN_IDENTIFIER,
    Relatedness,
    are_related,
    parent_likelihood_score,
    relatedness,
    slide_title,
)
from app.scorm_import.units import ContentUnit

from manifest_builders import (
    item,
    organization,
    organizations,
    resource,
    resources,
    scorm12_manifest,
)


# ── Scoring ─────────────────────────────────────────────────────────────────

def test_identifier_keywords_add_up() -> None:
    unit = ContentUnit("Main_Menu", entry_url="start.html")
    assert parent_likelihood_score(unit) == MAIN_IN_IDENTIFIER + MENU_IN_IDENTIFIER


def test_entry_url_keywords() -> None:
    unit = ContentUnit("sco", entry_url="content/main/index.html")
    assert parent_likelihood_score(unit) == INDEX_IN_ENTRY_URL + MAIN_IN_ENTRY_URL


def test_lesson_and_digits_are_penalized() -> None:
    unit = ContentUnit("lesson2", entry_url="l2.html")
    assert parent_likelihood_score(unit) == LESSON_IN_IDENTIFIER + DIGIT_IN_IDENTIFIER


@pytest.mark.parametrize(
    ("first", "second", "expected"),
    [
        ("intro", "intro_part", Relatedness.SUBSTRING),
        ("MAIN", "main_page", Relatedness.SUBSTRING),
        ("module1", "module2", Relatedness.SHARED_PREFIX),
        ("ab1", "ab22", Relatedness.NUMERIC_SERIES),
        ("quiz", "video", Relatedness.NONE),
        ("ab", "ac", Relatedness.NONE),
        ("", "anything", Relatedness.NONE),
        (None, "anything", Relatedness.NONE),
    ],
)
def test_relatedness(first, second, expected) -> None:
    assert relatedness(first, second) is expected
    assert are_related(first, second) is (expected is not Relatedness.NONE)


@pytest.mark.parametrize(
    ("index", "href", "expected"),
    [
        (1, "intro.html", "Slide 1: Intro"),
        (2, "content/getting_started.html", "Slide 2: Getting Started"),
        (3, "html_basics.html", "Slide 3: HTML Basics"),
    ],
)
def test_slide_title(index, href, expected) -> None:
    assert slide_title(index, href) == expected


# ── Resource-only reconstruction ────────────────────────────────────────────

def _no_org_manifest(*entries: str) -> str:
    return scorm12_manifest(resources(*entries))


def test_no_organization_main_resource_becomes_parent() -> None:
    manifest = parse_manifest(_no_org_manifest(
        resource("course_main", "main.html"),
        resource("quiz", "quiz.html"),
        resource("logo", "logo.png", scorm_type="asset"),
    ))
    (root,) = manifest.scos
    assert root.identifier == "course_main"
    assert root.is_block
    assert root.entry_url is None
    assert [child.identifier for child in root.children] == ["quiz"]
    assert root.children[0].entry_url == "quiz.html"
    assert manifest.organization is None
    assert manifest.title == "MANIFEST-12"
    assert manifest.entry_point == "quiz.html"


def test_without_positive_score_units_stay_siblings() -> None:
    manifest = parse_manifest(_no_org_manifest(
        resource("lesson1", "l1.html"),
        resource("lesson2", "l2.html"),
    ))
    assert [unit.identifier for unit in manifest.scos] == ["lesson1", "lesson2"]
    assert all(not unit.is_block for unit in manifest.scos)
    assert "no_parent_candidate" in [event.code for event in manifest.events]


def test_score_ties_go_to_the_first_unit() -> None:
    manifest = parse_manifest(_no_org_manifest(
        resource("index_a", "a.html"),
        resource("index_b", "b.html"),
    ))
    (root,) = manifest.scos
    assert root.identifier == "index_a"
    assert [child.identifier for child in root.children] == ["index_b"]


def test_single_sco_resource_is_a_lone_leaf() -> None:
    manifest = parse_manifest(_no_org_manifest(resource("only", "only.html")))
    (unit,) = manifest.scos
    assert not unit.is_block
    assert unit.entry_url == "only.html"


def test_sco_resource_without_href_is_skipped() -> None:
    manifest = parse_manifest(_no_org_manifest(
        resource("broken", None),
        resource("page", "page.html"),
    ))
    assert [unit.identifier for unit in manifest.scos] == ["page"]
    (skipped,) = [event for event in manifest.events if event.code == "resource_skipped"]
    assert skipped.level == "error"


def test_no_organizations_and_no_scos_is_fatal() -> None:
    with pytest.raises(InvalidScormArchiveError) as exc_info:
        parse_manifest(_no_org_manifest(resource("logo", "logo.png", scorm_type="asset")))
    assert exc_info.value.key == messages.NO_ORGANIZATION_FOUND


def test_empty_organizations_element_uses_resources() -> None:
    manifest = parse_manifest(scorm12_manifest(
        organizations(default=None) + resources(resource("page", "page.html"))
    ))
    assert [unit.identifier for unit in manifest.scos] == ["page"]


def test_empty_organizations_without_scos_has_no_sco() -> None:
    with pytest.raises(InvalidScormArchiveError) as exc_info:
        parse_manifest(scorm12_manifest(
            organizations(default=None) + resources(resource("logo", "logo.png", scorm_type="asset"))
        ))
    assert exc_info.value.key == messages.NO_SCO_IN_SCORM_ARCHIVE


def test_organization_without_items_uses_resources() -> None:
    manifest = parse_manifest(scorm12_manifest(
        organizations(organization())
        + resources(resource("main", "main.html"), resource("extra", "extra.html"))
    ))
    (root,) = manifest.scos
    assert root.identifier == "main"
    assert manifest.organization == "ORG-1"
    assert "empty_organization" in [event.code for event in manifest.events]


# ── Single-item repair ──────────────────────────────────────────────────────

def test_single_item_adopts_related_unreferenced_resources() -> None:
    manifest = parse_manifest(scorm12_manifest(
        organizations(organization(item("module_item", "module")))
        + resources(
            resource("module", "module.html"),
            resource("module_2", "module_2.html"),
            resource("glossary", "glossary.html"),
            resource("module_pdf", "module.pdf", scorm_type="asset"),
        )
    ))
    (root,) = manifest.scos
    assert root.identifier == "module_item"
    assert root.is_block
    assert root.entry_url is None
    assert [child.identifier for child in root.children] == ["module_2"]
    assert root.children[0].entry_url == "module_2.html"


def test_single_item_is_left_alone_with_one_sco() -> None:
    manifest = parse_manifest(scorm12_manifest(
        organizations(organization(item("module_item", "module")))
        + resources(resource("module", "module.html"), resource("module_pdf", "m.pdf", scorm_type="asset"))
    ))
    (root,) = manifest.scos
    assert not root.is_block
    assert root.entry_url == "module.html"


def test_two_items_are_not_repaired() -> None:
    manifest = parse_manifest(scorm12_manifest(
        organizations(organization(item("one", "module"), item("two", "module")))
        + resources(resource("module", "module.html"), resource("module_2", "module_2.html"))
    ))
    assert [unit.identifier for unit in manifest.scos] == ["one", "two"]
    assert all(not unit.children for unit in manifest.scos)


# ── Slide splitting ─────────────────────────────────────────────────────────

def test_multi_html_resource_is_split_into_slides() -> None:
    manifest = parse_manifest(scorm12_manifest(
        organizations(organization(item("DECK", "RES-DECK", title="Deck")))
        + resources(resource(
            "RES-DECK", "intro.html",
            files=("intro.html", "body.html", "outro.html", "script.js", "styles.css"),
        ))
    ))
    (deck,) = manifest.scos
    assert deck.is_block
    assert deck.entry_url is None
    assert deck.title == "Deck"
    assert [child.identifier for child in deck.children] == ["DECK_1", "DECK_2", "DECK_3"]
    assert [child.title for child in deck.children] == [
        "Slide 1: Intro",
        "Slide 2: Body",
        "Slide 3: Outro",
    ]
    assert [child.entry_url for child in deck.children] == ["intro.html", "body.html", "outro.html"]
    assert all(child.parent is deck for child in deck.children)


def test_single_html_file_is_not_split() -> None:
    manifest = parse_manifest(scorm12_manifest(
        organizations(organization(item("PAGE", "RES")))
        + resources(resource("RES", "page.html", files=("page.html", "page.js")))
    ))
    assert not manifest.scos[0].is_block
