"""Shared domain exception classes for the SCORM service.

``InvalidScormArchiveError`` is raised by the import core and mapped to an
HTTP 422 envelope in ``app.main``. HTTP-only failures subclass
``HTTPException`` with preset status codes.
"""
from fastapi import HTTPException, status

from app.scorm_import.messages import MESSAGES


class InvalidScormArchiveError(Exception):
    """Raised when a SCORM package or its manifest cannot be resolved.

    ``key`` is one of the stable message-catalog keys, never formatted text.
    """

    def __init__(self, key: str, detail: str = ""):
        if key not in MESSAGES:
            raise ValueError(f"Unknown SCORM error key: {key}")
        self.key = key
        self.detail = detail
        message = MESSAGES[key]
        super().__init__(f"{message} ({detail})" if detail else message)


class ScormPackageNotFound(HTTPException):
    def __init__(self, package_id: str = "") -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"SCORM package not found: {package_id}",
        )


class PackageTooLarge(HTTPException):
    def __init__(self, max_mb: int) -> None:
        super().__init__(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Package exceeds the maximum allowed size of {max_mb} MB.",
        )
