"""Domain layer: errors, schemas, constants."""

from .errors import (
    DocfillError,
    ErrorCodes,
    ExtractionError,
    RenderError,
    TagIssue,
    ValidationError,
)
from .schemas import (
    ErrorResponse,
    InspectResponse,
    LetterRequest,
    TemplatePackage,
)

__all__ = [
    "DocfillError",
    "ErrorCodes",
    "ExtractionError",
    "RenderError",
    "TagIssue",
    "ValidationError",
    "ErrorResponse",
    "InspectResponse",
    "LetterRequest",
    "TemplatePackage",
]
