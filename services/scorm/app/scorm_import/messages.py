"""Message catalog for SCORM import failures.

Errors carry a stable key; callers localize by looking the key up in their
own catalog. ``MESSAGES`` is the default English text.
"""

INVALID_SCORM_ARCHIVE = "invalid_scorm_archive"
INVALID_SCORM_VERSION = "invalid_scorm_version"
NO_SCO_IN_SCORM_ARCHIVE = "no_sco_in_scorm_archive"
DEFAULT_ORGANIZATION_NOT_FOUND = "default_organization_not_found"
NO_ORGANIZATION_FOUND = "no_organization_found"
SCO_WITH_NO_IDENTIFIER = "sco_with_no_identifier"
SCO_RESOURCE_WITHOUT_HREF = "sco_resource_without_href"
SCO_WITHOUT_RESOURCE = "sco_without_resource"
CANNOT_LOAD_IMSMANIFEST = "cannot_load_imsmanifest"
INVALID_SCORM_MANIFEST_IDENTIFIER = "invalid_scorm_manifest_identifier"

MESSAGES: dict[str, str] = {
    INVALID_SCORM_ARCHIVE: "Invalid SCORM archive.",
    INVALID_SCORM_VERSION: "Invalid SCORM version.",
    NO_SCO_IN_SCORM_ARCHIVE: "No items in SCORM archive.",
    DEFAULT_ORGANIZATION_NOT_FOUND: "SCORM item default organization not found.",
    NO_ORGANIZATION_FOUND: "No organization found.",
    SCO_WITH_NO_IDENTIFIER: "SCORM item without identifier.",
    SCO_RESOURCE_WITHOUT_HREF: "SCORM item resource without entry link.",
    SCO_WITHOUT_RESOURCE: "SCORM item without resource.",
    CANNOT_LOAD_IMSMANIFEST: "Can not load SCORM manifest.",
    INVALID_SCORM_MANIFEST_IDENTIFIER: "Invalid SCORM manifest identifier.",
}


def get_message(key: str) -> str:
    """Return the English text for ``key``. Unknown keys raise ``KeyError``."""
    return MESSAGES[key]
