"""
Factories for catalog entities with the usual defaults filled in
"""

from datetime import datetime, timezone
from typing import Any

from policy_acceptance.acceptance.models import (
    Company,
    CompanySettings,
    PolicyAcceptance,
    PolicyData,
    PolicySettings,
    PolicyType,
    PolicyVersion,
    User,
    UserRole,
)

DEFAULT_VERSION = "1.0"


def create_policy_data(
    policy_id: str,
    policy_type: PolicyType | str,
    title: str,
    versions: list[PolicyVersion],
    user_acceptances: list[PolicyAcceptance] | None = None,
    settings: dict[str, Any] | None = None,
    now: datetime | None = None,
) -> PolicyData:
    """
    Build a document whose current version is its newest version

    Args:
        policy_id: Document id
        policy_type: Kind of document
        title: Display title
        versions: Versions in any order (sorted newest first)
        user_acceptances: Existing ledger, if any
        settings: Overrides for PolicySettings fields
        now: Creation timestamp (defaults to the system clock)
    """
    ordered = sorted(versions, key=lambda v: v.date, reverse=True)
    stamp = now or datetime.now(timezone.utc)

    return PolicyData(
        id=policy_id,
        type=PolicyType(policy_type),
        title=title,
        versions=ordered,
        current_version=ordered[0].version if ordered else DEFAULT_VERSION,
        user_acceptances=user_acceptances or [],
        created_at=stamp,
        updated_at=stamp,
        settings=PolicySettings.model_validate(settings or {}),
    )


def create_user(
    user_id: str,
    email: str,
    name: str,
    role: UserRole | str = UserRole.USER,
    company_id: str | None = None,
    can_accept_for_company: bool = False,
) -> User:
    return User(
        id=user_id,
        email=email,
        name=name,
        role=UserRole(role),
        company_id=company_id,
        can_accept_for_company=can_accept_for_company,
    )


def create_company(
    company_id: str,
    name: str,
    admin_users: list[str] | None = None,
    settings: dict[str, Any] | None = None,
) -> Company:
    """Company that requires company acceptance and disallows individual acceptance"""
    return Company(
        id=company_id,
        name=name,
        admin_users=admin_users or [],
        requires_company_acceptance=True,
        allow_individual_acceptance=False,
        settings=CompanySettings.model_validate(settings or {}),
    )
