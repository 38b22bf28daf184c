"""
Tests for the Required-Documents Aggregator
"""

from policy_acceptance.acceptance.models import (
    AcceptanceStatus,
    OrganizationSettings,
    PolicyData,
    User,
)
from policy_acceptance.acceptance.requirements import required_policies, status_report
from tests.helpers import make_acceptance, make_policy, make_version, utc

NOW = utc(2025, 1, 15, 12)


def test_required_lists_pending_and_overdue_in_catalog_order(
    alice: User, individual_org: OrganizationSettings, privacy: PolicyData
) -> None:
    overdue = make_policy(
        "sec-001", [make_version("1.0", utc(2024, 12, 1), deadline=utc(2025, 1, 1))]
    )
    accepted = make_policy(
        "aup-001",
        [make_version("1.0", utc(2024, 12, 1))],
        acceptances=[make_acceptance("acc-1", "aup-001", "1.0", "alice", utc(2024, 12, 2))],
    )
    not_required = make_policy(
        "cookies-001", [make_version("1.0", utc(2024, 12, 1))], requires_acceptance=False
    )
    catalog = [overdue, accepted, privacy, not_required]

    result = required_policies(catalog, alice, individual_org, NOW)

    assert [p.id for p in result] == ["sec-001", "privacy-001"]


def test_required_is_idempotent(
    alice: User, individual_org: OrganizationSettings, catalog: list[PolicyData]
) -> None:
    first = required_policies(catalog, alice, individual_org, NOW)
    second = required_policies(catalog, alice, individual_org, NOW)

    assert [p.id for p in first] == [p.id for p in second]


def test_required_does_not_mutate_catalog(
    alice: User, individual_org: OrganizationSettings, catalog: list[PolicyData]
) -> None:
    snapshot = [p.model_dump() for p in catalog]

    required_policies(catalog, alice, individual_org, NOW)

    assert [p.model_dump() for p in catalog] == snapshot


def test_empty_catalog(alice: User, individual_org: OrganizationSettings) -> None:
    assert required_policies([], alice, individual_org, NOW) == []


def test_status_report(
    alice: User, individual_org: OrganizationSettings, catalog: list[PolicyData]
) -> None:
    report = status_report(catalog, alice, individual_org, utc(2025, 3, 1))

    assert report == {
        "terms-001": AcceptanceStatus.OVERDUE,
        "privacy-001": AcceptanceStatus.PENDING,
    }
