"""Caller identity and the reporter/assignee access rules.

Identity comes from the `X-User-Id` header. The rules only apply when
ENFORCE_ACCESS_POLICY is enabled:

- any authenticated caller may read
- a caller may only create bugs reported by themselves
- the reporter or the assignee may update a bug
- only the reporter may delete a bug
"""

import logging
from typing import Optional

from fastapi import Header, HTTPException, status

from app import config
from app.schemas import Bug, BugCreate

logger = logging.getLogger(__name__)


def policy_enabled() -> bool:
    return config.ENFORCE_ACCESS_POLICY


def can_create(user_id: str, request: BugCreate) -> bool:
    return request.reported_by == user_id


def can_update(user_id: str, bug: Bug) -> bool:
    return user_id in (bug.reported_by, bug.assigned_to)


def can_delete(user_id: str, bug: Bug) -> bool:
    return bug.reported_by == user_id


async def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
) -> Optional[str]:
    """Dependency returning the caller identity, required under the access policy."""
    user_id = x_user_id.strip() if x_user_id else None

    if policy_enabled() and not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required"
        )

    return user_id


def ensure_allowed(allowed: bool, user_id: Optional[str], action: str) -> None:
    """Raise 403 when the policy is enabled and the rule denied the action."""
    if policy_enabled() and not allowed:
        logger.warning(f"User {user_id} not allowed to {action}", extra={"user_id": user_id})
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail=f"Not allowed to {action}"
        )
