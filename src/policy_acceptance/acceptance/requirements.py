"""
Required-Documents Aggregator

Filters a catalog down to the documents a user still has to act on. Recomputed
from the catalog on every call; there is nothing to invalidate.
"""

from datetime import datetime

from policy_acceptance.acceptance.models import (
    AcceptanceStatus,
    OrganizationSettings,
    PolicyData,
    User,
)
from policy_acceptance.acceptance.status import resolve_status
from policy_acceptance.kernel.time import default_time_provider

ACTIONABLE_STATUSES = frozenset({AcceptanceStatus.PENDING, AcceptanceStatus.OVERDUE})


def required_policies(
    catalog: list[PolicyData],
    user: User,
    org_settings: OrganizationSettings,
    now: datetime | None = None,
) -> list[PolicyData]:
    """
    Documents whose status for ``user`` is PENDING or OVERDUE, in catalog order

    One "now" is used for the whole pass so two documents with the same
    deadline can never land on different sides of it.
    """
    at = now or default_time_provider.now()
    return [
        policy
        for policy in catalog
        if resolve_status(policy, user, org_settings, at) in ACTIONABLE_STATUSES
    ]


def status_report(
    catalog: list[PolicyData],
    user: User,
    org_settings: OrganizationSettings,
    now: datetime | None = None,
) -> dict[str, AcceptanceStatus]:
    """Map of policy id -> status for every document in the catalog"""
    at = now or default_time_provider.now()
    return {policy.id: resolve_status(policy, user, org_settings, at) for policy in catalog}
