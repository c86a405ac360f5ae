"""
Errors raised by the import pipeline.

Every error derives from ImportException so callers can catch one type and
surface ``exception.message`` to the user. None of them are retried.
"""
from typing import Optional


class ImportException(Exception):
    """Base class for all import failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ImportInProgress(ImportException):
    """Another import currently holds the lock for this organization."""

    def __init__(self, organization_id: str, message: Optional[str] = None):
        self.organization_id = organization_id
        super().__init__(
            message or f"An import is already running for organization '{organization_id}'. Try again later."
        )


class UnknownImporterType(ImportException):
    """The requested format key is not registered."""

    def __init__(self, importer_type: str, message: Optional[str] = None):
        self.importer_type = importer_type
        super().__init__(message or f"Invalid importer type '{importer_type}'")


class ParseError(ImportException):
    """The payload could not be parsed (CSV structure, dates, archive, options)."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message)


class EntityCreationError(ImportException):
    """Persisting a new entity was rejected (validation or constraint violation)."""

    def __init__(self, entity_type: str, message: str):
        self.entity_type = entity_type
        super().__init__(f"Could not create {entity_type}: {message}")


class UnsupportedResolutionMode(ImportException):
    """Resolver configured without attach-to-existing; that mode has no semantics."""

    def __init__(self, entity_type: str):
        self.entity_type = entity_type
        super().__init__(f"Resolution without attaching to existing {entity_type} entities is not implemented")
