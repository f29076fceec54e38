"""Read-only view over a parsed ``imsmanifest.xml``.

The import core only walks this view; it never mutates the underlying
ElementTree. Names are matched by local name, namespaces by URI.
"""

from __future__ import annotations

import io
import re
import xml.etree.ElementTree as ET
from collections.abc import Iterator
from dataclasses import dataclass, field

from app.exceptions import InvalidScormArchiveError
from app.scorm_import.messages import (
    CANNOT_LOAD_IMSMANIFEST,
    INVALID_SCORM_ARCHIVE,
    INVALID_SCORM_MANIFEST_IDENTIFIER,
)

# Text input is already decoded, so its declared encoding no longer applies.
_XML_DECLARATION = re.compile(r"^\ufeff?\s*<\?xml[^>]*\?>")


def split_qname(tag: str) -> tuple[str | None, str]:
    """Split an ElementTree ``{uri}local`` name into ``(uri, local)``."""
    if tag.startswith("{"):
        uri, _, local = tag[1:].partition("}")
        return uri, local
    return None, tag


class ManifestNode:
    """A single element of the manifest."""

    __slots__ = ("_element",)

    def __init__(self, element: ET.Element):
        self._element = element

    def __repr__(self) -> str:
        return f"<ManifestNode {self.local_name} identifier={self.attr('identifier')!r}>"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ManifestNode) and other._element is self._element

    def __hash__(self) -> int:
        return id(self._element)

    @property
    def local_name(self) -> str:
        return split_qname(self._element.tag)[1]

    @property
    def namespace(self) -> str | None:
        return split_qname(self._element.tag)[0]

    @property
    def text(self) -> str:
        """Concatenated text content, stripped."""
        return "".join(self._element.itertext()).strip()

    def attr(self, name: str, namespace: str | None = None) -> str | None:
        key = f"{{{namespace}}}{name}" if namespace else name
        return self._element.get(key)

    def children(self, local_name: str | None = None) -> list[ManifestNode]:
        return [
            ManifestNode(child)
            for child in self._element
            if isinstance(child.tag, str)
            and (local_name is None or split_qname(child.tag)[1] == local_name)
        ]

    def first_child(self, local_name: str) -> ManifestNode | None:
        for child in self.children(local_name):
            return child
        return None

    def iter(self, local_name: str | None = None) -> Iterator[ManifestNode]:
        """Yield descendants (self excluded) in document order."""
        for element in self._element.iter():
            if element is self._element or not isinstance(element.tag, str):
                continue
            if local_name is None or split_qname(element.tag)[1] == local_name:
                yield ManifestNode(element)


@dataclass
class ManifestDocument:
    """Parsed manifest plus the namespace bindings declared on its root."""

    root: ManifestNode
    root_namespaces: list[tuple[str, str]] = field(default_factory=list)

    @classmethod
    def from_bytes(cls, data: bytes | str) -> ManifestDocument:
        if isinstance(data, str):
            data = _XML_DECLARATION.sub("", data, count=1).encode("utf-8")

        bindings: list[tuple[str, str]] = []
        root_seen = False
        try:
            parser = ET.iterparse(io.BytesIO(data), events=("start-ns", "start"))
            for event, payload in parser:
                if root_seen:
                    continue
                if event == "start-ns":
                    bindings.append(payload)
                else:
                    root_seen = True
            root = parser.root
        except ET.ParseError as exc:
            raise InvalidScormArchiveError(CANNOT_LOAD_IMSMANIFEST, str(exc)) from exc

        if root is None:
            raise InvalidScormArchiveError(CANNOT_LOAD_IMSMANIFEST, "empty document")
        return cls.from_element(root, bindings)

    @classmethod
    def from_element(
        cls,
        root: ET.Element,
        root_namespaces: list[tuple[str, str]] | None = None,
    ) -> ManifestDocument:
        node = ManifestNode(root)
        if node.local_name != "manifest":
            raise InvalidScormArchiveError(
                INVALID_SCORM_ARCHIVE, f"unexpected root element {node.local_name!r}"
            )
        identifier = (node.attr("identifier") or "").strip()
        if not identifier:
            raise InvalidScormArchiveError(INVALID_SCORM_MANIFEST_IDENTIFIER)
        return cls(root=node, root_namespaces=list(root_namespaces or []))

    @property
    def identifier(self) -> str:
        return (self.root.attr("identifier") or "").strip()

    def iter(self, local_name: str) -> Iterator[ManifestNode]:
        return self.root.iter(local_name)

    def first(self, local_name: str) -> ManifestNode | None:
        for node in self.iter(local_name):
            return node
        return None

    def resources(self) -> list[ManifestNode]:
        return list(self.iter("resource"))
