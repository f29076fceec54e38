"""Structural reconciliation of degenerate manifests.

Manifests regularly under-declare their structure: no organization at all,
one item standing in for many launchable resources, or one resource bundling
a deck of HTML pages. The heuristics here synthesize a usable hierarchy in
those cases. They never raise; a heuristic that finds nothing leaves the
tree as it was.
"""

from __future__ import annotations

import enum
import posixpath
import re
from collections.abc import Iterable

from app.scorm_import.classifier import ResourceClassifier, ResourceKind
from app.scorm_import.context import ParseContext
from app.scorm_import.document import ManifestNode
from app.scorm_import.units import ContentUnit

# ── Parent-likelihood weights ────────────────────────────────────────────────

MAIN_IN_IDENTIFIER = 10
INDEX_IN_IDENTIFIER = 8
INTRO_IN_IDENTIFIER = 6
MENU_IN_IDENTIFIER = 5
TOC_IN_IDENTIFIER = 5
INDEX_IN_ENTRY_URL = 4
MAIN_IN_ENTRY_URL = 4
LESSON_IN_IDENTIFIER = -2
PAGE_IN_IDENTIFIER = -2
DIGIT_IN_IDENTIFIER = -1

IDENTIFIER_WEIGHTS = (
    ("main", MAIN_IN_IDENTIFIER),
    ("index", INDEX_IN_IDENTIFIER),
    ("intro", INTRO_IN_IDENTIFIER),
    ("menu", MENU_IN_IDENTIFIER),
    ("toc", TOC_IN_IDENTIFIER),
    ("lesson", LESSON_IN_IDENTIFIER),
    ("page", PAGE_IN_IDENTIFIER),
)
ENTRY_URL_WEIGHTS = (
    ("index", INDEX_IN_ENTRY_URL),
    ("main", MAIN_IN_ENTRY_URL),
)

SHARED_PREFIX_LENGTH = 3
SLIDE_EXTENSION = "html"

_NUMERIC_SUFFIX = re.compile(r"^(.*?)(\d+)$")
_DIGIT = re.compile(r"\d")


def parent_likelihood_score(unit: ContentUnit) -> int:
    """How likely ``unit`` is the root of a flat set of SCOs."""
    identifier = unit.identifier.lower()
    entry_url = (unit.entry_url or "").lower()

    score = sum(weight for keyword, weight in IDENTIFIER_WEIGHTS if keyword in identifier)
    score += sum(weight for keyword, weight in ENTRY_URL_WEIGHTS if keyword in entry_url)
    if _DIGIT.search(identifier):
        score += DIGIT_IN_IDENTIFIER
    return score


class Relatedness(enum.IntEnum):
    NONE = 0
    NUMERIC_SERIES = 1
    SHARED_PREFIX = 2
    SUBSTRING = 3


def relatedness(first: str | None, second: str | None) -> Relatedness:
    """Strongest rule under which two identifiers belong together."""
    if not first or not second:
        return Relatedness.NONE
    a, b = first.lower(), second.lower()

    if a in b or b in a:
        return Relatedness.SUBSTRING
    if len(a) >= SHARED_PREFIX_LENGTH and a[:SHARED_PREFIX_LENGTH] == b[:SHARED_PREFIX_LENGTH]:
        return Relatedness.SHARED_PREFIX

    match_a, match_b = _NUMERIC_SUFFIX.match(a), _NUMERIC_SUFFIX.match(b)
    if match_a and match_b and match_a.group(1) == match_b.group(1):
        return Relatedness.NUMERIC_SERIES
    return Relatedness.NONE


def are_related(first: str | None, second: str | None) -> bool:
    return relatedness(first, second) > Relatedness.NONE


# ── Slide splitting ──────────────────────────────────────────────────────────

def html_files(resource: ManifestNode | None) -> list[str]:
    """Hrefs of the ``.html`` files a resource declares, in document order."""
    if resource is None:
        return []
    hrefs = []
    for file_node in resource.children("file"):
        href = (file_node.attr("href") or "").strip()
        if posixpath.splitext(href)[1].lower() == f".{SLIDE_EXTENSION}":
            hrefs.append(href)
    return hrefs


def slide_title(index: int, href: str) -> str:
    """``"Slide 2: Getting Started"`` for ``getting_started.html``."""
    stem = posixpath.splitext(posixpath.basename(href))[0]
    words = stem.replace("_", " ").split()
    name = " ".join(word[:1].upper() + word[1:] for word in words)
    return f"Slide {index}: {name.replace('Html', 'HTML')}"


def split_slides(unit: ContentUnit, resource: ManifestNode, ctx: ParseContext) -> list[ContentUnit]:
    """Replace a leaf's launch target with one child unit per HTML file."""
    hrefs = html_files(resource)
    if len(hrefs) < 2:
        return []

    unit.convert_to_block()
    slides = []
    for index, href in enumerate(hrefs, start=1):
        slide = ContentUnit(
            identifier=f"{unit.identifier}_{index}",
            title=slide_title(index, href),
            entry_url=href,
            resource_identifier=resource.attr("identifier"),
        )
        unit.add_child(slide)
        slides.append(slide)

    ctx.emit(
        "slides_split",
        f"Split {unit.identifier!r} into {len(slides)} slides",
        identifier=unit.identifier,
        slides=len(slides),
    )
    return slides


# ── Reconciler ───────────────────────────────────────────────────────────────

class StructuralReconciler:
    def __init__(self, ctx: ParseContext, classifier: ResourceClassifier | None = None):
        self.ctx = ctx
        self.classifier = classifier or ResourceClassifier(ctx)

    def sco_resources(self, resources: Iterable[ManifestNode]) -> list[ManifestNode]:
        return [resource for resource in resources if self.classifier.classify(resource) is ResourceKind.SCO]

    def unit_from_resource(self, resource: ManifestNode) -> ContentUnit | None:
        """Leaf unit for a SCO resource, or ``None`` if it lacks identifier/href."""
        identifier = (resource.attr("identifier") or "").strip()
        href = (resource.attr("href") or "").strip()
        if not identifier or not href:
            self.ctx.emit(
                "resource_skipped",
                "SCO resource without identifier or href skipped",
                level="error",
                identifier=identifier or None,
                href=href or None,
            )
            return None
        return ContentUnit(
            identifier=identifier,
            title=identifier,
            entry_url=href,
            resource_identifier=identifier,
        )

    def reconstruct_from_resources(self, resources: list[ManifestNode]) -> list[ContentUnit]:
        """Build the forest straight from ``<resource>`` elements."""
        units = []
        assets = 0
        for resource in resources:
            if self.classifier.classify(resource) is ResourceKind.ASSET:
                assets += 1
                continue
            unit = self.unit_from_resource(resource)
            if unit is not None:
                units.append(unit)

        self.ctx.emit(
            "resources_reconstructed",
            f"Built {len(units)} units from resources",
            scos=len(units),
            assets=assets,
        )
        if len(units) > 1:
            return self.establish_relationships(units)
        return units

    def establish_relationships(self, units: list[ContentUnit]) -> list[ContentUnit]:
        """Make the most parent-like unit the root of the others.

        Ties go to the first unit; without a strictly positive score the
        units stay siblings.
        """
        best: ContentUnit | None = None
        best_score = 0
        for unit in units:
            score = parent_likelihood_score(unit)
            if score > best_score:
                best, best_score = unit, score

        if best is None:
            self.ctx.emit("no_parent_candidate", "Units left as siblings", count=len(units))
            return units

        best.convert_to_block()
        for unit in units:
            if unit is not best:
                best.add_child(unit)
        self.ctx.emit(
            "parent_inferred",
            f"{best.identifier!r} chosen as root",
            identifier=best.identifier,
            score=best_score,
            children=len(best.children),
        )
        return [best]

    def attach_related_resources(
        self,
        unit: ContentUnit,
        resources: list[ManifestNode],
        referenced: set[str],
    ) -> list[ContentUnit]:
        """Attach unreferenced SCO resources related to ``unit`` as its children."""
        attached = []
        for resource in self.sco_resources(resources):
            identifier = resource.attr("identifier")
            if identifier in referenced or identifier == unit.resource_identifier:
                continue
            if not (are_related(unit.identifier, identifier) or are_related(unit.resource_identifier, identifier)):
                continue
            child = self.unit_from_resource(resource)
            if child is None:
                continue
            unit.add_child(child)
            attached.append(child)

        if attached:
            unit.convert_to_block()
            self.ctx.emit(
                "resources_attached",
                f"Attached {len(attached)} related resources to {unit.identifier!r}",
                identifier=unit.identifier,
                attached=[child.identifier for child in attached],
            )
        return attached

    def repair_single_item(
        self,
        draft: list[ContentUnit],
        resources: list[ManifestNode],
        referenced: set[str],
    ) -> list[ContentUnit]:
        """A lone leaf item while several SCO resources exist becomes their root."""
        if len(draft) != 1:
            return draft
        root = draft[0]
        if root.is_block or root.children:
            return draft
        if len(self.sco_resources(resources)) < 2:
            return draft
        self.attach_related_resources(root, resources, referenced)
        return draft
