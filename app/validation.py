"""Field-level validation for bug submissions.

The validators never raise: every failed check is collected as a
`FieldError` so the caller can show all problems at once.

Two known training defects are kept by default and can be switched off:

- "critical" severity is rejected (`ALLOW_CRITICAL_SEVERITY`)
- whitespace-only tags pass the length check (`STRICT_TAG_VALIDATION`)
"""

import logging
import re
from typing import Optional

from app import config
from app.schemas import BugCreate, BugPriority, BugSeverity, FieldError, ValidationResult

logger = logging.getLogger(__name__)

TITLE_MIN_LENGTH = 5
TITLE_MAX_LENGTH = 100
DESCRIPTION_MIN_LENGTH = 10
MAX_TAGS = 5
TAG_MIN_LENGTH = 2

# Weak on purpose: only a non-blank local part and one non-blank char after "@"
ASSIGNEE_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]")

LEGACY_SEVERITIES = (BugSeverity.LOW, BugSeverity.MEDIUM, BugSeverity.HIGH)
ALL_SEVERITIES = tuple(BugSeverity)
ALL_PRIORITIES = tuple(BugPriority)


def accepted_severities(allow_critical: Optional[bool] = None) -> tuple[BugSeverity, ...]:
    if allow_critical is None:
        allow_critical = config.ALLOW_CRITICAL_SEVERITY
    return ALL_SEVERITIES if allow_critical else LEGACY_SEVERITIES


def validate_bug_request(
    candidate: BugCreate, allow_critical_severity: Optional[bool] = None
) -> ValidationResult:
    """
    Validate a bug creation request.

    Args:
        candidate: The submitted bug
        allow_critical_severity: Accept "critical" severity. Defaults to
            the ALLOW_CRITICAL_SEVERITY setting.

    Returns:
        ValidationResult listing every failed check in check order
    """
    errors: list[FieldError] = []

    title = (candidate.title or "").strip()
    if not title:
        errors.append(FieldError(field="title", message="Title is required"))
    elif len(title) < TITLE_MIN_LENGTH:
        errors.append(
            FieldError(field="title", message="Title must be at least 5 characters long")
        )
    elif len(title) > TITLE_MAX_LENGTH:
        errors.append(
            FieldError(field="title", message="Title must be less than 100 characters")
        )

    description = (candidate.description or "").strip()
    if not description:
        errors.append(FieldError(field="description", message="Description is required"))
    elif len(description) < DESCRIPTION_MIN_LENGTH:
        errors.append(
            FieldError(
                field="description",
                message="Description must be at least 10 characters long",
            )
        )

    severities = [s.value for s in accepted_severities(allow_critical_severity)]
    if candidate.severity not in severities:
        errors.append(FieldError(field="severity", message="Invalid severity level"))

    if candidate.priority not in [p.value for p in ALL_PRIORITIES]:
        errors.append(FieldError(field="priority", message="Invalid priority level"))

    if not (candidate.reported_by or "").strip():
        errors.append(FieldError(field="reportedBy", message="Reporter name is required"))

    if candidate.assigned_to:
        if not ASSIGNEE_EMAIL_PATTERN.match(candidate.assigned_to):
            errors.append(
                FieldError(field="assignedTo", message="Invalid email format for assignee")
            )

    return ValidationResult(is_valid=len(errors) == 0, errors=errors)


def validate_tags(tags: list[str], strict: Optional[bool] = None) -> ValidationResult:
    """
    Validate a tag list.

    Produces at most one error for the tag count and one aggregate error
    for short tags. With `strict`, tags are trimmed before measuring.
    """
    if strict is None:
        strict = config.STRICT_TAG_VALIDATION

    logger.debug("Validating tags: %s", tags)

    errors: list[FieldError] = []

    if len(tags) > MAX_TAGS:
        errors.append(FieldError(field="tags", message="Maximum 5 tags allowed"))

    short_tags = [
        tag for tag in tags if len(tag.strip() if strict else tag) < TAG_MIN_LENGTH
    ]
    if short_tags:
        errors.append(
            FieldError(field="tags", message="Each tag must be at least 2 characters long")
        )

    return ValidationResult(is_valid=len(errors) == 0, errors=errors)


def format_validation_errors(errors: list[FieldError]) -> str:
    """Join errors as "field: message" pairs for display."""
    return ", ".join(f"{error.field}: {error.message}" for error in errors)
