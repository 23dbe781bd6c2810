"""Record store for bugs.

The whole collection lives in one storage slot as a JSON array. Every
mutation reads the array, changes it and writes it back; an asyncio lock
makes the store the single writer for its slot within the process.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
import string
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

import pydantic
from fastapi import Request

from app import config
from app.schemas import Bug, BugCreate, BugStatus, BugUpdate
from app.storage import KeyValueStorage, StorageError, get_storage

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "bug-tracker-bugs"

SEED_BUGS = [
    {
        "id": "bug-1",
        "title": "Login form validation not working",
        "description": "Users can submit empty login forms without validation errors",
        "status": "open",
        "severity": "high",
        "priority": "high",
        "reportedBy": "john.doe@example.com",
        "assignedTo": "dev@example.com",
        "createdAt": "2024-01-15T10:00:00Z",
        "updatedAt": "2024-01-15T10:00:00Z",
        "tags": ["authentication", "validation", "frontend"],
        "stepsToReproduce": "1. Go to login page\n2. Leave fields empty\n3. Click submit",
        "expectedBehavior": "Validation errors should appear",
        "actualBehavior": "Form submits without validation",
    },
    {
        "id": "bug-2",
        "title": "Database connection timeout",
        "description": "API requests randomly fail with timeout errors",
        "status": "in-progress",
        "severity": "critical",
        "priority": "critical",
        "reportedBy": "jane.smith@example.com",
        "assignedTo": "backend@example.com",
        "createdAt": "2024-01-14T14:30:00Z",
        "updatedAt": "2024-01-15T09:15:00Z",
        "tags": ["database", "performance", "backend"],
    },
]


class BugStoreError(Exception):
    """Base class for record store failures."""

    pass


class FetchFailedError(BugStoreError):
    """The collection could not be read or parsed."""

    pass


class SaveFailedError(BugStoreError):
    """The collection could not be written back."""

    pass


class CreateFailedError(BugStoreError):
    """A new bug could not be created."""

    pass


class BugNotFoundError(BugStoreError):
    """No bug with the requested id exists."""

    def __init__(self, bug_id: str):
        super().__init__("Bug not found")
        self.bug_id = bug_id


class LookupStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass
class LookupResult:
    """Outcome of a lookup by id, keeping "absent" apart from "could not read"."""

    status: LookupStatus
    bug: Optional[Bug] = None
    error: Optional[BugStoreError] = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_uuid_id() -> str:
    return str(uuid.uuid4())


def generate_legacy_id() -> str:
    """Millisecond timestamp plus 5 random base-36 chars. Can collide."""
    suffix = "".join(random.choices(string.digits + string.ascii_lowercase, k=5))
    return f"{int(time.time() * 1000)}{suffix}"


ID_GENERATORS = {
    "uuid": generate_uuid_id,
    "legacy": generate_legacy_id,
}

# Optional fields an update may reset to null
CLEARABLE_FIELDS = frozenset(
    {"assigned_to", "steps_to_reproduce", "expected_behavior", "actual_behavior"}
)


class BugStore:
    """CRUD over the bug collection stored in a single slot."""

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = DEFAULT_STORAGE_KEY,
        id_strategy: str = "uuid",
        read_delay: float = 0.0,
        write_delay: float = 0.0,
    ):
        if id_strategy not in ID_GENERATORS:
            raise ValueError(f"Unknown id strategy: {id_strategy}")

        self.storage = storage
        self.key = key
        self.id_strategy = id_strategy
        self.read_delay = read_delay
        self.write_delay = write_delay
        self._generate_id = ID_GENERATORS[id_strategy]
        self._write_lock = asyncio.Lock()

    async def list(self) -> list[Bug]:
        """
        Get all bugs.

        Returns:
            The stored bugs in insertion order, empty if nothing was stored

        Raises:
            FetchFailedError: If reading the slot fails for any reason or it
                holds a malformed value
        """
        logger.debug("Fetching bugs from storage")

        try:
            stored = await self.storage.get(self.key)
            bugs = self._parse(stored)
        except Exception as e:
            logger.error(f"Error fetching bugs: {str(e)}")
            raise FetchFailedError("Failed to fetch bugs") from e

        if self.read_delay:
            await asyncio.sleep(self.read_delay)

        logger.debug(f"Found {len(bugs)} bugs")
        return bugs

    async def create(self, request: BugCreate) -> Bug:
        """
        Create a new bug with status "open".

        Raises:
            CreateFailedError: If the collection cannot be read, the request
                does not form a valid bug, or the write fails
        """
        logger.info("Creating new bug", extra={"title": request.title})

        async with self._write_lock:
            try:
                bugs = await self.list()

                now = _utcnow()
                new_bug = Bug.model_validate(
                    {
                        **request.model_dump(),
                        "id": self._generate_id(),
                        "status": BugStatus.OPEN,
                        "created_at": now,
                        "updated_at": now,
                    }
                )

                bugs.append(new_bug)
                await self._save(bugs)
            except (BugStoreError, pydantic.ValidationError) as e:
                logger.error(f"Error creating bug: {str(e)}")
                raise CreateFailedError("Failed to create bug") from e

        logger.info("Bug created successfully", extra={"bug_id": new_bug.id})
        return new_bug

    async def update(self, bug_id: str, patch: BugUpdate) -> Bug:
        """
        Apply a partial update to an existing bug.

        Only the fields set on `patch` are merged; `updated_at` is refreshed.
        An explicit null clears the optional fields (assignee and the
        free-text fields) and is ignored for the required ones.

        Raises:
            BugNotFoundError: If no bug has this id
            FetchFailedError: If the collection cannot be read
            SaveFailedError: If the write fails
        """
        changes = {
            name: value
            for name, value in patch.model_dump(exclude_unset=True).items()
            if value is not None or name in CLEARABLE_FIELDS
        }
        logger.info(f"Updating bug {bug_id}", extra={"bug_id": bug_id, "fields": sorted(changes)})

        async with self._write_lock:
            bugs = await self.list()
            index = next((i for i, bug in enumerate(bugs) if bug.id == bug_id), None)

            if index is None:
                logger.warning(f"Bug {bug_id} not found for update")
                raise BugNotFoundError(bug_id)

            updated_bug = Bug.model_validate(
                {**bugs[index].model_dump(), **changes, "updated_at": _utcnow()}
            )
            bugs[index] = updated_bug
            await self._save(bugs)

        logger.info("Bug updated successfully", extra={"bug_id": bug_id})
        return updated_bug

    async def delete(self, bug_id: str) -> None:
        """
        Delete a bug.

        Raises:
            BugNotFoundError: If no bug has this id
            FetchFailedError: If the collection cannot be read
            SaveFailedError: If the write fails
        """
        logger.info(f"Deleting bug {bug_id}", extra={"bug_id": bug_id})

        async with self._write_lock:
            bugs = await self.list()
            remaining = [bug for bug in bugs if bug.id != bug_id]

            if len(remaining) == len(bugs):
                logger.warning(f"Bug {bug_id} not found for deletion")
                raise BugNotFoundError(bug_id)

            await self._save(remaining)

        logger.info("Bug deleted successfully", extra={"bug_id": bug_id})

    async def get_by_id(self, bug_id: str) -> Optional[Bug]:
        """Get a bug by id; read failures are logged and reported as None."""
        result = await self.lookup(bug_id)
        if result.status == LookupStatus.FAILED:
            logger.error(f"Error getting bug {bug_id}: {str(result.error)}")
        return result.bug

    async def lookup(self, bug_id: str) -> LookupResult:
        """Get a bug by id, reporting read failures instead of raising them."""
        try:
            bugs = await self.list()
        except FetchFailedError as e:
            return LookupResult(status=LookupStatus.FAILED, error=e)

        for bug in bugs:
            if bug.id == bug_id:
                return LookupResult(status=LookupStatus.FOUND, bug=bug)

        return LookupResult(status=LookupStatus.NOT_FOUND)

    async def seed_data(self) -> None:
        """Store the demo bugs, unless the collection already has entries."""
        async with self._write_lock:
            existing = await self.list()
            if existing:
                logger.debug("Collection not empty, skipping seed data")
                return

            await self._save([Bug.model_validate(doc) for doc in SEED_BUGS])

        logger.info("Seed data created")

    def _parse(self, stored: Optional[str]) -> list[Bug]:
        if stored is None:
            return []

        # json.JSONDecodeError and pydantic.ValidationError are ValueErrors
        docs = json.loads(stored)
        if not isinstance(docs, list):
            raise TypeError(f"Expected a JSON array, got {type(docs).__name__}")

        return [Bug.model_validate(doc) for doc in docs]

    async def _save(self, bugs: list[Bug]) -> None:
        try:
            await self.storage.set(self.key, json.dumps([bug.to_doc() for bug in bugs]))
        except StorageError as e:
            logger.error(f"Error saving bugs: {str(e)}")
            raise SaveFailedError("Failed to save bugs") from e

        if self.write_delay:
            await asyncio.sleep(self.write_delay)


def build_bug_store(storage: Optional[KeyValueStorage] = None) -> BugStore:
    """Create the process-wide store from configuration."""
    return BugStore(
        storage or get_storage(),
        key=config.STORAGE_KEY,
        id_strategy=config.ID_STRATEGY,
        read_delay=config.STORE_READ_DELAY_MS / 1000,
        write_delay=config.STORE_WRITE_DELAY_MS / 1000,
    )


def get_bug_store(request: Request) -> BugStore:
    """FastAPI dependency returning the store created at startup."""
    return request.app.state.bug_store
