# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Error taxonomy shared by all academic record services.

Three kinds of failure cross service boundaries:

- NotFoundError: a referenced student, course, enrollment or grade does
  not exist (or is soft-deleted). Surfaced to the caller, never retried.
- ValidationError: input or a business rule was violated. Eligibility
  checks report it as a structured negative result instead of raising;
  batch imports record it as a row error; everything else raises it.
- TransactionError: a commit-phase failure. The unit of work has already
  been rolled back when this is raised.

Each domain service derives its specific errors from these so that the
API layer can map them to HTTP status codes generically.
"""


class AcademicRecordError(Exception):
    """Base exception for all academic record errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(AcademicRecordError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity: str, identifier: object) -> None:
        """Initialize the error.

        Args:
            entity: Entity name, e.g. "Student".
            identifier: The id, code or email that was looked up.
        """
        super().__init__(f"{entity} with id {identifier} not found")
        self.entity = entity
        self.identifier = identifier


class ValidationError(AcademicRecordError):
    """Raised when input or a business rule is violated."""

    pass


class ConflictError(ValidationError):
    """Raised when a write conflicts with existing state (duplicates, capacity)."""

    pass


class TransactionError(AcademicRecordError):
    """Raised when committing a unit of work fails.

    Attributes:
        original_error: The underlying exception that aborted the commit.
    """

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message
