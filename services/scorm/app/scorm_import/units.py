"""ContentUnit: one node of the resolved SCO tree.

A unit is either a block (container, no launch target) or a leaf that
launches exactly one entry URL. Parents own their children; the child keeps
only a weak back-reference.
"""

from __future__ import annotations

import enum
import uuid
import weakref
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any


class TimeLimitAction(str, enum.Enum):
    EXIT_MESSAGE = "exit,message"
    EXIT_NO_MESSAGE = "exit,no message"
    CONTINUE_MESSAGE = "continue,message"
    CONTINUE_NO_MESSAGE = "continue,no message"

    @classmethod
    def from_raw(cls, raw: str | None) -> TimeLimitAction | None:
        """Matching member for ``raw`` (case-insensitive), else ``None``."""
        if raw is None:
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


# Fields compared by ``to_dict`` and persisted per row.
UNIT_FIELDS = (
    "identifier",
    "resource_identifier",
    "is_block",
    "title",
    "visible",
    "parameters",
    "entry_url",
    "score_to_pass_int",
    "score_to_pass_decimal",
    "completion_threshold",
    "max_time_allowed",
    "time_limit_action",
    "launch_data",
    "prerequisites",
    "choice_enabled",
    "flow_enabled",
    "tracked",
    "completion_set_by_content",
)


@dataclass(eq=False)
class ContentUnit:
    identifier: str
    is_block: bool = False
    title: str | None = None
    visible: bool = True
    parameters: str | None = None
    entry_url: str | None = None
    resource_identifier: str | None = None

    # Scoring / time rules
    score_to_pass_int: int | None = None
    score_to_pass_decimal: float | None = None
    completion_threshold: float | None = None
    max_time_allowed: str | None = None
    time_limit_action: TimeLimitAction | None = None
    launch_data: str | None = None
    prerequisites: str | None = None

    # SCORM 2004 navigation flags
    choice_enabled: bool | None = None
    flow_enabled: bool | None = None
    tracked: bool | None = None
    completion_set_by_content: bool | None = None

    children: list[ContentUnit] = field(default_factory=list, repr=False)
    uuid: uuid.UUID = field(default_factory=uuid.uuid4, repr=False)
    _parent_ref: weakref.ReferenceType[ContentUnit] | None = field(
        default=None, init=False, repr=False
    )

    def __post_init__(self) -> None:
        if not self.identifier or not self.identifier.strip():
            raise ValueError("ContentUnit requires a non-empty identifier")
        if self.title is None:
            self.title = self.identifier
        children, self.children = self.children, []
        for child in children:
            self.add_child(child)

    # ── Tree ────────────────────────────────────────────────────────────────

    @property
    def parent(self) -> ContentUnit | None:
        return self._parent_ref() if self._parent_ref is not None else None

    @property
    def is_leaf(self) -> bool:
        return not self.is_block

    def ancestors(self) -> Iterator[ContentUnit]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def add_child(self, child: ContentUnit) -> ContentUnit:
        """Append ``child`` and point it back at this unit.

        A child already attached elsewhere is moved. Attaching a unit under
        itself or one of its descendants raises ``ValueError``.
        """
        if child is self or any(node is child for node in self.ancestors()):
            raise ValueError(f"Attaching {child.identifier!r} under {self.identifier!r} creates a cycle")
        previous = child.parent
        if previous is self:
            return child
        if previous is not None:
            previous.children.remove(child)
        child._parent_ref = weakref.ref(self)
        self.children.append(child)
        return child

    def detach(self) -> None:
        previous = self.parent
        if previous is not None:
            previous.children.remove(self)
        self._parent_ref = None

    def convert_to_block(self) -> None:
        """Turn a leaf into a container; its launch target is dropped."""
        self.is_block = True
        self.entry_url = None

    def iter_tree(self) -> Iterator[ContentUnit]:
        """This unit and all descendants, pre-order."""
        yield self
        for child in self.children:
            yield from child.iter_tree()

    def iter_leaves(self) -> Iterator[ContentUnit]:
        return (unit for unit in self.iter_tree() if unit.is_leaf)

    # ── Snapshot ────────────────────────────────────────────────────────────

    def to_dict(self, *, include_uuid: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if include_uuid:
            data["uuid"] = str(self.uuid)
        for name in UNIT_FIELDS:
            value = getattr(self, name)
            data[name] = value.value if isinstance(value, enum.Enum) else value
        data["children"] = [child.to_dict(include_uuid=include_uuid) for child in self.children]
        return data


def iter_forest(roots: Iterable[ContentUnit]) -> Iterator[ContentUnit]:
    for root in roots:
        yield from root.iter_tree()


def validate_forest(roots: Iterable[ContentUnit]) -> None:
    """Check the tree invariants, raising ``ValueError`` on the first violation."""
    seen: set[int] = set()
    for root in roots:
        if root.parent is not None:
            raise ValueError(f"Root {root.identifier!r} has a parent")
        for unit in root.iter_tree():
            if id(unit) in seen:
                raise ValueError(f"Unit {unit.identifier!r} is reachable twice")
            seen.add(id(unit))
            if not unit.identifier:
                raise ValueError("Unit without identifier")
            if unit.is_block and unit.entry_url is not None:
                raise ValueError(f"Block {unit.identifier!r} has an entry URL")
            if not unit.is_block and unit.entry_url is None:
                raise ValueError(f"Leaf {unit.identifier!r} has no entry URL")
            for child in unit.children:
                if child.parent is not unit:
                    raise ValueError(f"Unit {child.identifier!r} has a stale parent reference")
