"""SCORM manifest (imsmanifest.xml) parser.

Resolves the SCO tree of a SCORM 1.2 / 2004 package: detects the version,
selects the organization, builds one unit per item and repairs degenerate
structures from the declared resources.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from app.exceptions import InvalidScormArchiveError
from app.scorm_import.classifier import ResourceClassifier
from app.scorm_import.context import ParseContext
from app.scorm_import.document import ManifestDocument, ManifestNode
from app.scorm_import.events import EventSink, ImportEvent
from app.scorm_import.messages import NO_ORGANIZATION_FOUND, NO_SCO_IN_SCORM_ARCHIVE
from app.scorm_import.reconciler import StructuralReconciler
from app.scorm_import.sequencing import SequencingParser
from app.scorm_import.tree_builder import ItemTreeBuilder, referenced_identifiers
from app.scorm_import.units import ContentUnit, iter_forest, validate_forest
from app.scorm_import.version import ScormVersion


@dataclass
class ScormManifest:
    """Parsed SCORM manifest."""

    identifier: str
    version: ScormVersion
    title: str
    schema_version: str | None = None
    default_org: str | None = None
    organization: str | None = None
    namespaces: dict[str, str] = field(default_factory=dict)
    scos: list[ContentUnit] = field(default_factory=list)
    events: list[ImportEvent] = field(default_factory=list)

    @property
    def entry_point(self) -> str | None:
        """Entry URL of the first launchable unit, pre-order."""
        for unit in iter_forest(self.scos):
            if unit.is_leaf:
                return unit.entry_url
        return None

    def iter_units(self):
        return iter_forest(self.scos)


def parse_manifest(xml_content: str | bytes, *, events: EventSink | None = None) -> ScormManifest:
    """Parse imsmanifest.xml content and return the resolved SCO tree."""
    document = ManifestDocument.from_bytes(xml_content)
    return ManifestParser(document, events=events).parse()


class ManifestParser:
    def __init__(self, document: ManifestDocument, *, events: EventSink | None = None):
        self.ctx = ParseContext.for_document(document, sink=events)
        self.classifier = ResourceClassifier(self.ctx)
        self.builder = ItemTreeBuilder(self.ctx, SequencingParser(self.ctx))
        self.reconciler = StructuralReconciler(self.ctx, self.classifier)

    @property
    def document(self) -> ManifestDocument:
        return self.ctx.document

    def parse(self) -> ScormManifest:
        resources = self.document.resources()
        organizations = self.document.first("organizations")
        organization = None

        if organizations is None:
            self.ctx.emit("no_organizations", "Manifest declares no organizations", level="warning")
            scos = self.reconciler.reconstruct_from_resources(resources)
            if not scos:
                raise InvalidScormArchiveError(NO_ORGANIZATION_FOUND)
        else:
            organization = self.builder.select_organization(organizations)
            if organization is None:
                self.ctx.emit("no_organization", "No organization element, using resources", level="warning")
                scos = self.reconciler.reconstruct_from_resources(resources)
            else:
                scos = self._build_from_organization(organization, resources)

        if not scos:
            raise InvalidScormArchiveError(NO_SCO_IN_SCORM_ARCHIVE)
        validate_forest(scos)

        return ScormManifest(
            identifier=self.document.identifier,
            version=self.ctx.version,
            title=self._title(organization),
            schema_version=self._schema_version(),
            default_org=organizations.attr("default") if organizations is not None else None,
            organization=organization.attr("identifier") if organization is not None else None,
            namespaces=self.ctx.namespaces.as_dict(),
            scos=scos,
            events=list(self.ctx.recorded.events),
        )

    def _build_from_organization(
        self,
        organization: ManifestNode,
        resources: list[ManifestNode],
    ) -> list[ContentUnit]:
        draft = self.builder.build_from_organization(organization, resources)
        referenced = referenced_identifiers(organization)

        # Single-item repair runs before the empty-organization fallback.
        draft = self.reconciler.repair_single_item(draft, resources, referenced)
        if not draft:
            self.ctx.emit(
                "empty_organization",
                "Organization has no items, using resources",
                level="warning",
                organization=organization.attr("identifier"),
            )
            draft = self.reconciler.reconstruct_from_resources(resources)
        return draft

    def _title(self, organization: ManifestNode | None) -> str:
        if organization is not None:
            title = organization.first_child("title")
            if title is not None and title.text:
                return title.text
        return self.document.identifier

    def _schema_version(self) -> str | None:
        metadata = self.document.root.first_child("metadata")
        schema_version = metadata.first_child("schemaversion") if metadata is not None else None
        if schema_version is not None and schema_version.text:
            return schema_version.text
        return None
