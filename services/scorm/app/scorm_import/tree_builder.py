"""Builds the SCO tree declared by an ``<organization>``.

One ``ContentUnit`` per ``<item>``. Items with an ``identifierref`` are leaves
and must resolve to a ``<resource>`` with an ``href``; items without one are
blocks whose children are their nested items.
"""

from __future__ import annotations

from collections.abc import Callable

from app.exceptions import InvalidScormArchiveError
from app.scorm_import.context import ParseContext
from app.scorm_import.document import ManifestNode
from app.scorm_import.messages import (
    DEFAULT_ORGANIZATION_NOT_FOUND,
    SCO_RESOURCE_WITHOUT_HREF,
    SCO_WITH_NO_IDENTIFIER,
    SCO_WITHOUT_RESOURCE,
)
from app.scorm_import.reconciler import html_files, split_slides
from app.scorm_import.sequencing import SequencingParser
from app.scorm_import.units import ContentUnit, TimeLimitAction
from app.scorm_import.values import parse_finite_float, parse_int

MASTERY_SCORE_MIN = 0
MASTERY_SCORE_MAX = 100


class ItemTreeBuilder:
    def __init__(self, ctx: ParseContext, sequencing: SequencingParser | None = None):
        self.ctx = ctx
        self.sequencing = sequencing or SequencingParser(ctx)
        self._adlcp = ctx.namespaces.adlcp_uris()
        self._imsss = ctx.namespaces.imsss_uris()
        self._overrides: dict[str, Callable[[ContentUnit, ManifestNode], None]] = {
            "masteryscore": self._set_mastery_score,
            "maxtimeallowed": self._set_max_time,
            "timelimitaction": self._set_time_limit_action,
            "timeLimitAction": self._set_time_limit_action,
            "datafromlms": self._set_launch_data,
            "dataFromLMS": self._set_launch_data,
            "prerequisites": self._set_prerequisites,
            "completionThreshold": self._set_completion_threshold,
        }
        self._sequencing_overrides: dict[str, Callable[[ContentUnit, ManifestNode], None]] = {
            "attemptAbsoluteDurationLimit": self._set_max_time,
            "minNormalizedMeasure": self._set_min_normalized_measure,
        }

    # ── Organization selection ──────────────────────────────────────────────

    def select_organization(self, organizations: ManifestNode) -> ManifestNode | None:
        """The organization to build from.

        A declared ``default`` must name an existing organization. Without one
        the first organization is used; ``None`` means there is none at all.
        """
        default = organizations.attr("default")
        candidates = organizations.children("organization")

        if default is None:
            self.ctx.emit("no_default_organization", "No default organization declared", level="debug")
            return candidates[0] if candidates else None

        for organization in candidates:
            if organization.attr("identifier") == default:
                return organization
        raise InvalidScormArchiveError(DEFAULT_ORGANIZATION_NOT_FOUND, default)

    # ── Items ───────────────────────────────────────────────────────────────

    def build_from_organization(
        self,
        organization: ManifestNode,
        resources: list[ManifestNode],
    ) -> list[ContentUnit]:
        return self._build_items(organization, resources, parent=None)

    def _build_items(
        self,
        source: ManifestNode,
        resources: list[ManifestNode],
        parent: ContentUnit | None,
    ) -> list[ContentUnit]:
        units = []
        for item in source.children("item"):
            unit = self._build_item(item, resources, parent)
            units.append(unit)
        return units

    def _build_item(
        self,
        item: ManifestNode,
        resources: list[ManifestNode],
        parent: ContentUnit | None,
    ) -> ContentUnit:
        identifier = (item.attr("identifier") or "").strip()
        if not identifier:
            raise InvalidScormArchiveError(
                SCO_WITH_NO_IDENTIFIER,
                f"item under {parent.identifier!r}" if parent else "top-level item",
            )

        unit = ContentUnit(identifier=identifier)
        if parent is not None:
            parent.add_child(unit)

        unit.visible = (item.attr("isvisible") or "").strip() != "false"
        unit.parameters = item.attr("parameters")

        identifierref = item.attr("identifierref")
        resource = None
        if identifierref is None:
            unit.is_block = True
        else:
            resource = self.find_resource(identifierref, resources)
            unit.entry_url = self.resolve_entry_url(resource)
            unit.resource_identifier = identifierref

        self._apply_overrides(unit, item)
        if self.ctx.version.is_2004:
            self.sequencing.parse(item, unit)

        if unit.is_block:
            self._build_items(item, resources, parent=unit)
        elif len(html_files(resource)) > 1:
            split_slides(unit, resource, self.ctx)
        return unit

    def find_resource(self, identifierref: str, resources: list[ManifestNode]) -> ManifestNode:
        for resource in resources:
            if resource.attr("identifier") == identifierref:
                return resource
        raise InvalidScormArchiveError(SCO_WITHOUT_RESOURCE, identifierref)

    def resolve_entry_url(self, resource: ManifestNode) -> str:
        href = (resource.attr("href") or "").strip()
        if not href:
            raise InvalidScormArchiveError(SCO_RESOURCE_WITHOUT_HREF, resource.attr("identifier") or "")
        return href

    # ── Child-element overrides ─────────────────────────────────────────────

    def _apply_overrides(self, unit: ContentUnit, item: ManifestNode) -> None:
        """Apply ``<title>`` and metadata children in document order."""
        for child in item.children():
            name = child.local_name
            if child.namespace in self._adlcp:
                handler = self._overrides.get(name)
            elif child.namespace in self._imsss:
                handler = self._sequencing_overrides.get(name)
            elif name == "title":
                handler = self._set_title
            else:
                handler = None
            if handler is not None:
                handler(unit, child)

    def _set_title(self, unit: ContentUnit, node: ManifestNode) -> None:
        title = node.text
        if title:
            unit.title = title

    def _set_mastery_score(self, unit: ContentUnit, node: ManifestNode) -> None:
        value = parse_int(node.text)
        if value is None or not MASTERY_SCORE_MIN <= value <= MASTERY_SCORE_MAX:
            self._dropped(unit, "masteryscore", node.text)
            return
        unit.score_to_pass_int = value

    def _set_min_normalized_measure(self, unit: ContentUnit, node: ManifestNode) -> None:
        value = parse_finite_float(node.text)
        if value is None:
            self._dropped(unit, "minNormalizedMeasure", node.text)
            return
        unit.score_to_pass_decimal = value

    def _set_max_time(self, unit: ContentUnit, node: ManifestNode) -> None:
        if node.text:
            unit.max_time_allowed = node.text

    def _set_time_limit_action(self, unit: ContentUnit, node: ManifestNode) -> None:
        action = TimeLimitAction.from_raw(node.text)
        if action is None:
            self._dropped(unit, "timeLimitAction", node.text)
            return
        unit.time_limit_action = action

    def _set_launch_data(self, unit: ContentUnit, node: ManifestNode) -> None:
        unit.launch_data = node.text

    def _set_prerequisites(self, unit: ContentUnit, node: ManifestNode) -> None:
        unit.prerequisites = node.text

    def _set_completion_threshold(self, unit: ContentUnit, node: ManifestNode) -> None:
        raw = node.text or node.attr("minProgressMeasure")
        value = parse_finite_float(raw)
        if value is None:
            self._dropped(unit, "completionThreshold", raw)
            return
        unit.completion_threshold = value

    def _dropped(self, unit: ContentUnit, field_name: str, raw: str | None) -> None:
        self.ctx.emit(
            "value_dropped",
            f"Ignoring unreadable {field_name} value {raw!r}",
            level="warning",
            identifier=unit.identifier,
            field=field_name,
        )


def referenced_identifiers(organization: ManifestNode | None) -> set[str]:
    """Resource identifiers referenced by any item under ``organization``."""
    if organization is None:
        return set()
    return {
        ref
        for item in organization.iter("item")
        if (ref := item.attr("identifierref")) is not None
    }
