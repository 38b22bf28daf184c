"""
Status Resolver - Is this document accepted, pending or overdue for this user?

The rules are evaluated in a fixed order and the first match wins. All
functions here are pure: the ledger is read, never written, and "now" is
either supplied or captured once per evaluation so the deadline check cannot
see two different clocks within one call.
"""

import math
from datetime import datetime

from policy_acceptance.acceptance.models import (
    AcceptanceStatus,
    AcceptanceType,
    OrganizationSettings,
    PolicyAcceptance,
    PolicyData,
    PolicyVersion,
    User,
)
from policy_acceptance.kernel.time import default_time_provider, ensure_utc

SECONDS_PER_DAY = 24 * 60 * 60


def find_current_version(policy: PolicyData) -> PolicyVersion | None:
    """Return the version named by ``policy.current_version``, if it exists"""
    for version in policy.versions:
        if version.version == policy.current_version:
            return version
    return None


def find_user_acceptance(policy: PolicyData, user_id: str) -> PolicyAcceptance | None:
    """
    Most recent valid acceptance of the current version by ``user_id``

    Users may hold several records for the same version (e.g. re-accepted
    after a revocation); the latest one governs.
    """
    matches = [
        a
        for a in policy.user_acceptances
        if a.user_id == user_id and a.version == policy.current_version and a.is_valid
    ]
    if not matches:
        return None
    return max(matches, key=lambda a: a.accepted_at)


def find_company_acceptance(policy: PolicyData) -> PolicyAcceptance | None:
    """
    Most recent valid company acceptance of the current version

    Any acceptor qualifies as long as the record carries a company name.
    """
    matches = [
        a
        for a in policy.user_acceptances
        if a.acceptance_type == AcceptanceType.COMPANY
        and a.company_info is not None
        and a.company_info.company_name
        and a.version == policy.current_version
        and a.is_valid
    ]
    if not matches:
        return None
    return max(matches, key=lambda a: a.accepted_at)


def resolve_status(
    policy: PolicyData,
    user: User,
    org_settings: OrganizationSettings,
    now: datetime | None = None,
) -> AcceptanceStatus:
    """
    Resolve the acceptance status of one document for one user

    Evaluation order (first match wins):
    1. Document does not require acceptance -> NOT_REQUIRED
    2. Current version missing from the version list -> NOT_REQUIRED
    3. User holds a valid acceptance of the current version -> ACCEPTED
    4. Inheritance enabled, user belongs to a company, and a valid company
       acceptance of the current version exists -> ACCEPTED
    5. Current version has a deadline and now is strictly after it -> OVERDUE
    6. Otherwise -> PENDING

    Args:
        policy: Document with its ledger
        user: User being evaluated
        org_settings: Organization inheritance rules
        now: Evaluation time (captured once if omitted)

    Returns:
        The resolved AcceptanceStatus
    """
    if not policy.settings.requires_acceptance:
        return AcceptanceStatus.NOT_REQUIRED

    current = find_current_version(policy)
    if current is None:
        return AcceptanceStatus.NOT_REQUIRED

    if find_user_acceptance(policy, user.id) is not None:
        return AcceptanceStatus.ACCEPTED

    if (
        org_settings.inheritance_rules.new_users_inherit_company_acceptance
        and user.company_id
        and find_company_acceptance(policy) is not None
    ):
        return AcceptanceStatus.ACCEPTED

    if current.deadline is not None:
        at = ensure_utc(now) if now is not None else default_time_provider.now()
        if at > current.deadline:
            return AcceptanceStatus.OVERDUE

    return AcceptanceStatus.PENDING


def days_until_deadline(deadline: datetime, now: datetime) -> int:
    """
    Whole days left before ``deadline``, rounded up; negative once past

    A deadline later today counts as one day left.
    """
    seconds = (ensure_utc(deadline) - ensure_utc(now)).total_seconds()
    return math.ceil(seconds / SECONDS_PER_DAY)


def is_version_overdue(version: PolicyVersion, now: datetime) -> bool:
    """True when the version has a deadline that lies entirely in the past"""
    if version.deadline is None:
        return False
    return days_until_deadline(version.deadline, now) < 0
