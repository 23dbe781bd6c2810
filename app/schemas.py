from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class BugStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"


class BugSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class BugPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class CamelModel(BaseModel):
    """Base model serialising to the camelCase keys of the stored records."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BugCreate(CamelModel):
    # Plain optional strings so nulls and out-of-set values reach the validator
    title: Optional[str] = None
    description: Optional[str] = None
    severity: Optional[str] = None
    priority: Optional[str] = None
    assigned_to: Optional[str] = None
    reported_by: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    steps_to_reproduce: Optional[str] = None
    expected_behavior: Optional[str] = None
    actual_behavior: Optional[str] = None


class BugUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[BugStatus] = None
    severity: Optional[BugSeverity] = None
    priority: Optional[BugPriority] = None
    assigned_to: Optional[str] = None
    tags: Optional[list[str]] = None
    steps_to_reproduce: Optional[str] = None
    expected_behavior: Optional[str] = None
    actual_behavior: Optional[str] = None


class Bug(CamelModel):
    id: str
    title: str
    description: str
    status: BugStatus = BugStatus.OPEN
    severity: BugSeverity
    priority: BugPriority
    assigned_to: Optional[str] = None
    reported_by: str
    created_at: datetime
    updated_at: datetime
    tags: list[str] = Field(default_factory=list)
    steps_to_reproduce: Optional[str] = None
    expected_behavior: Optional[str] = None
    actual_behavior: Optional[str] = None

    def to_doc(self) -> dict:
        """Convert to the JSON-ready dict stored in the collection blob."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class FieldError(CamelModel):
    field: str
    message: str


class ValidationResult(CamelModel):
    is_valid: bool
    errors: list[FieldError] = Field(default_factory=list)
