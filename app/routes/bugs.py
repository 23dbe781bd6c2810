import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, status, Depends

from app.auth import can_create, can_delete, can_update, ensure_allowed, get_current_user, policy_enabled
from app.schemas import Bug, BugCreate, BugUpdate, FieldError, ValidationResult
from app.services.bug_store import (
    BugNotFoundError,
    BugStore,
    BugStoreError,
    LookupStatus,
    get_bug_store,
)
from app.validation import format_validation_errors, validate_bug_request, validate_tags

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/bugs", tags=["bugs"])


def _raise_invalid(errors: list[FieldError]) -> None:
    raise HTTPException(
        status_code=422,
        detail={
            "message": format_validation_errors(errors),
            "errors": [error.model_dump(by_alias=True) for error in errors],
        },
    )


def _raise_unavailable(exc: BugStoreError) -> None:
    raise HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
    ) from exc


def _validate_candidate(payload: BugCreate) -> ValidationResult:
    bug_result = validate_bug_request(payload)
    tag_result = validate_tags(payload.tags)
    errors = bug_result.errors + tag_result.errors
    return ValidationResult(is_valid=len(errors) == 0, errors=errors)


async def _get_bug_or_404(store: BugStore, bug_id: str) -> Bug:
    result = await store.lookup(bug_id)

    if result.status == LookupStatus.FAILED:
        _raise_unavailable(result.error)
    if result.status == LookupStatus.NOT_FOUND:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Bug not found"
        )

    return result.bug


@router.get("/", response_model=list[Bug])
async def list_bugs(
    store: BugStore = Depends(get_bug_store),
    user_id: Optional[str] = Depends(get_current_user),
):
    """List all bugs."""
    try:
        return await store.list()
    except BugStoreError as e:
        _raise_unavailable(e)


@router.post("/validate", response_model=ValidationResult)
async def validate_bug(
    payload: BugCreate,
    user_id: Optional[str] = Depends(get_current_user),
):
    """Run the bug and tag validators without storing anything."""
    return _validate_candidate(payload)


@router.post("/seed", response_model=list[Bug])
async def seed_bugs(
    store: BugStore = Depends(get_bug_store),
    user_id: Optional[str] = Depends(get_current_user),
):
    """Load the demo bugs into an empty collection."""
    try:
        await store.seed_data()
        return await store.list()
    except BugStoreError as e:
        _raise_unavailable(e)


@router.get("/{bug_id}", response_model=Bug, status_code=status.HTTP_200_OK)
async def get_bug(
    bug_id: str,
    store: BugStore = Depends(get_bug_store),
    user_id: Optional[str] = Depends(get_current_user),
):
    """Get bug by ID"""
    return await _get_bug_or_404(store, bug_id)


@router.post("/", response_model=Bug, status_code=status.HTTP_201_CREATED)
async def create_bug(
    payload: BugCreate,
    store: BugStore = Depends(get_bug_store),
    user_id: Optional[str] = Depends(get_current_user),
):
    """Validate and create a new bug"""
    result = _validate_candidate(payload)
    if not result.is_valid:
        logger.info(
            f"Rejected bug submission: {format_validation_errors(result.errors)}"
        )
        _raise_invalid(result.errors)

    ensure_allowed(can_create(user_id, payload), user_id, "report bugs for another user")

    try:
        return await store.create(payload)
    except BugStoreError as e:
        _raise_unavailable(e)


@router.put("/{bug_id}", response_model=Bug, status_code=status.HTTP_200_OK)
async def update_bug(
    bug_id: str,
    payload: BugUpdate,
    store: BugStore = Depends(get_bug_store),
    user_id: Optional[str] = Depends(get_current_user),
):
    """Update bug by ID"""
    if payload.tags is not None:
        tag_result = validate_tags(payload.tags)
        if not tag_result.is_valid:
            _raise_invalid(tag_result.errors)

    if policy_enabled():
        bug = await _get_bug_or_404(store, bug_id)
        ensure_allowed(can_update(user_id, bug), user_id, "update this bug")

    try:
        return await store.update(bug_id, payload)
    except BugNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Bug not found"
        )
    except BugStoreError as e:
        _raise_unavailable(e)


@router.delete("/{bug_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bug(
    bug_id: str,
    store: BugStore = Depends(get_bug_store),
    user_id: Optional[str] = Depends(get_current_user),
):
    """Delete bug by ID"""
    if policy_enabled():
        bug = await _get_bug_or_404(store, bug_id)
        ensure_allowed(can_delete(user_id, bug), user_id, "delete this bug")

    try:
        await store.delete(bug_id)
    except BugNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Bug not found"
        )
    except BugStoreError as e:
        _raise_unavailable(e)
