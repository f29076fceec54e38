"""SCORM 2004 ``<imsss:sequencing>`` metadata attached to items."""

from __future__ import annotations

from app.scorm_import.context import ParseContext
from app.scorm_import.document import ManifestNode
from app.scorm_import.units import ContentUnit
from app.scorm_import.values import parse_bool, parse_finite_float


class SequencingParser:
    def __init__(self, ctx: ParseContext):
        self.ctx = ctx

    def find_sequencing(self, item: ManifestNode) -> ManifestNode | None:
        imsss = self.ctx.namespaces.imsss_uris()
        for child in item.children("sequencing"):
            if child.namespace in imsss:
                return child
        return None

    def parse(self, item: ManifestNode, unit: ContentUnit) -> None:
        sequencing = self.find_sequencing(item)
        if sequencing is None:
            return

        control_mode = sequencing.first_child("controlMode")
        if control_mode is not None:
            unit.choice_enabled = self._flag(control_mode, "choice", unit)
            unit.flow_enabled = self._flag(control_mode, "flow", unit)

        delivery = sequencing.first_child("deliveryControls")
        if delivery is not None:
            unit.tracked = self._flag(delivery, "tracked", unit)
            unit.completion_set_by_content = self._flag(delivery, "completionSetByContent", unit)

        limits = sequencing.first_child("limitConditions")
        if limits is not None and unit.max_time_allowed is None:
            duration = limits.attr("attemptAbsoluteDurationLimit")
            if duration:
                unit.max_time_allowed = duration.strip()

        self._parse_primary_objective(sequencing, unit)
        self.parse_extensions(sequencing, unit)

    def parse_extensions(self, sequencing: ManifestNode, unit: ContentUnit) -> None:
        """Hook for sequencing rules and objectives.

        Rules are recorded but not interpreted.
        """
        rules = sequencing.first_child("sequencingRules")
        objectives = sequencing.first_child("objectives")
        if rules is None and objectives is None:
            return
        self.ctx.emit(
            "sequencing_rules_ignored",
            "Sequencing rules and objective maps are not interpreted",
            level="debug",
            identifier=unit.identifier,
            rules=len(rules.children()) if rules is not None else 0,
            objectives=len(objectives.children()) if objectives is not None else 0,
        )

    def _parse_primary_objective(self, sequencing: ManifestNode, unit: ContentUnit) -> None:
        if unit.score_to_pass_decimal is not None:
            return
        objectives = sequencing.first_child("objectives")
        primary = objectives.first_child("primaryObjective") if objectives is not None else None
        if primary is None:
            return
        measure = primary.first_child("minNormalizedMeasure")
        if measure is None:
            return
        value = parse_finite_float(measure.text)
        if value is not None:
            unit.score_to_pass_decimal = value

    def _flag(self, node: ManifestNode, name: str, unit: ContentUnit) -> bool | None:
        raw = node.attr(name)
        value = parse_bool(raw)
        if raw is not None and value is None:
            self.ctx.emit(
                "invalid_boolean_dropped",
                f"Ignoring non-boolean {name}={raw!r}",
                level="warning",
                identifier=unit.identifier,
            )
        return value
