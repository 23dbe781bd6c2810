"""
Validator Tests
===============
Field checks for bug submissions and tag lists, including the known
training defects and the settings that switch them off.
"""
from unittest.mock import patch

import pytest

from app.schemas import FieldError
from app.validation import format_validation_errors, validate_bug_request, validate_tags
from tests.conftest import make_request


def _fields(result):
    return [error.field for error in result.errors]


# ===================================================================
# validate_bug_request
# ===================================================================
def test_valid_request_has_no_errors():
    result = validate_bug_request(make_request())

    assert result.is_valid is True
    assert result.errors == []


def test_valid_request_without_assignee():
    result = validate_bug_request(make_request(assigned_to=None))
    assert result.is_valid is True


def test_title_boundaries():
    """4 chars after trimming fails, 5 passes, 100 passes, 101 fails."""
    assert _fields(validate_bug_request(make_request(title="  abcd  "))) == ["title"]
    assert validate_bug_request(make_request(title="  abcde  ")).is_valid
    assert validate_bug_request(make_request(title="x" * 100)).is_valid

    result = validate_bug_request(make_request(title="x" * 101))
    assert result.errors[0].message == "Title must be less than 100 characters"


def test_blank_title_is_required():
    result = validate_bug_request(make_request(title="   "))
    assert result.errors == [FieldError(field="title", message="Title is required")]


def test_description_length():
    short = validate_bug_request(make_request(description="too short"))
    assert short.errors == [
        FieldError(field="description", message="Description must be at least 10 characters long")
    ]
    assert validate_bug_request(make_request(description="ten chars!")).is_valid


def test_critical_severity_rejected_by_default():
    with patch("app.validation.config.ALLOW_CRITICAL_SEVERITY", False):
        result = validate_bug_request(make_request(severity="critical"))

    assert result.is_valid is False
    assert result.errors == [FieldError(field="severity", message="Invalid severity level")]


def test_critical_severity_accepted_when_allowed():
    assert validate_bug_request(make_request(severity="critical"), allow_critical_severity=True).is_valid

    with patch("app.validation.config.ALLOW_CRITICAL_SEVERITY", True):
        assert validate_bug_request(make_request(severity="critical")).is_valid


def test_critical_priority_accepted():
    assert validate_bug_request(make_request(priority="critical")).is_valid


def test_unknown_priority_rejected():
    result = validate_bug_request(make_request(priority="urgent"))
    assert result.errors == [FieldError(field="priority", message="Invalid priority level")]


def test_reporter_required():
    result = validate_bug_request(make_request(reported_by="  "))
    assert result.errors == [FieldError(field="reportedBy", message="Reporter name is required")]


@pytest.mark.parametrize("assignee", ["ok@x", "a@b", "dev@example.com", "a@b c"])
def test_weak_assignee_pattern_accepts(assignee):
    assert validate_bug_request(make_request(assigned_to=assignee)).is_valid


@pytest.mark.parametrize("assignee", ["bad@", "a@", "a@ ", "a @b", "@b", "nobody"])
def test_weak_assignee_pattern_rejects(assignee):
    result = validate_bug_request(make_request(assigned_to=assignee))
    assert result.errors == [
        FieldError(field="assignedTo", message="Invalid email format for assignee")
    ]


def test_empty_assignee_is_skipped():
    assert validate_bug_request(make_request(assigned_to="")).is_valid


def test_all_failures_collected_in_check_order():
    result = validate_bug_request(
        make_request(
            title="",
            description="",
            severity="critical",
            priority="none",
            reported_by="",
            assigned_to="x@",
        ),
        allow_critical_severity=False,
    )

    assert result.is_valid is False
    assert _fields(result) == [
        "title",
        "description",
        "severity",
        "priority",
        "reportedBy",
        "assignedTo",
    ]


# ===================================================================
# validate_tags
# ===================================================================
def test_too_many_tags_is_one_error():
    result = validate_tags(["aa", "bb", "cc", "dd", "ee", "ff"])

    assert result.errors == [FieldError(field="tags", message="Maximum 5 tags allowed")]


def test_short_tag_is_one_aggregate_error():
    assert validate_tags(["a", "bb"]).errors == [
        FieldError(field="tags", message="Each tag must be at least 2 characters long")
    ]
    assert len(validate_tags(["a", "b", "", "ok"]).errors) == 1


def test_count_and_length_errors_together():
    result = validate_tags(["a", "bb", "cc", "dd", "ee", "ff"])
    assert [error.message for error in result.errors] == [
        "Maximum 5 tags allowed",
        "Each tag must be at least 2 characters long",
    ]


def test_empty_tag_list_is_valid():
    assert validate_tags([]).is_valid


def test_whitespace_tag_passes_by_default():
    with patch("app.validation.config.STRICT_TAG_VALIDATION", False):
        assert validate_tags(["  "]).is_valid


def test_whitespace_tag_rejected_when_strict():
    assert validate_tags(["  ", "ui"], strict=True).is_valid is False
    assert validate_tags([" ui "], strict=True).is_valid


# ===================================================================
# format_validation_errors
# ===================================================================
def test_format_validation_errors():
    errors = [
        FieldError(field="title", message="Title is required"),
        FieldError(field="tags", message="Maximum 5 tags allowed"),
    ]

    assert format_validation_errors(errors) == (
        "title: Title is required, tags: Maximum 5 tags allowed"
    )
    assert format_validation_errors([]) == ""


def test_result_serialises_camel_case():
    result = validate_bug_request(make_request(title=""))
    data = result.model_dump(by_alias=True)

    assert data["isValid"] is False
    assert data["errors"][0] == {"field": "title", "message": "Title is required"}


def test_null_required_fields_are_reported():
    result = validate_bug_request(
        make_request(title=None, description=None, severity=None, priority=None, reported_by=None)
    )

    assert result.errors == [
        FieldError(field="title", message="Title is required"),
        FieldError(field="description", message="Description is required"),
        FieldError(field="severity", message="Invalid severity level"),
        FieldError(field="priority", message="Invalid priority level"),
        FieldError(field="reportedBy", message="Reporter name is required"),
    ]
