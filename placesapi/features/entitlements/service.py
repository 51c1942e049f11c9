"""
placesapi/features/entitlements/service.py

Plan-tier entitlement checks.

Plans form a total order: free < basic < premium < premium_plus.
An action lists the plans it is sold with; any plan at or above the
cheapest listed tier may perform it, except free-only actions, which
only the free tier may perform.
"""

from typing import Iterable, Optional

from fastapi import Depends

from placesapi.core.auth import Session, get_current_session
from placesapi.core.errors import PermissionError

PLAN_RANK = {
    "free": 0,
    "basic": 1,
    "premium": 2,
    "premium_plus": 3,
}

# Capability -> plans the action is sold with
ADD_CITY = frozenset({"basic", "premium"})
AI_GUIDE = frozenset({"premium"})


def plan_rank(plan: Optional[str]) -> int:
    """Rank of a plan; unknown or missing plans rank as free."""
    return PLAN_RANK.get(plan or "", PLAN_RANK["free"])


def plan_allows(plan: Optional[str], allowed: Iterable[str]) -> bool:
    """
    Decide whether `plan` satisfies an action sold with `allowed` plans.

    Never raises: an empty or unresolvable `allowed` set denies.
    """
    ranks = [PLAN_RANK[name] for name in (allowed or ()) if name in PLAN_RANK]
    if not ranks:
        return False

    rank = plan_rank(plan)
    if all(value == PLAN_RANK["free"] for value in ranks):
        return rank == PLAN_RANK["free"]

    return rank >= min(ranks)


def require_plan(plan: Optional[str], allowed: Iterable[str], message: str = "Your plan does not allow this action.") -> None:
    """Raise PermissionError (403) unless `plan` satisfies `allowed`."""
    if not plan_allows(plan, allowed):
        raise PermissionError(message)


def requires_plan(allowed: Iterable[str], message: str = "Your plan does not allow this action."):
    """FastAPI dependency: the authenticated session, gated on `allowed`."""
    allowed = frozenset(allowed)

    async def dependency(session: Session = Depends(get_current_session)) -> Session:
        require_plan(session.plan, allowed, message)
        return session

    return dependency
