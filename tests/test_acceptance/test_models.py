"""
Tests for Acceptance Models - Wire format, ordering and immutability
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from policy_acceptance.acceptance.models import (
    AcceptanceType,
    OrganizationSettings,
    PolicyAcceptance,
    PolicyData,
    PolicyVersion,
)
from tests.helpers import make_acceptance, make_company_info, make_version, utc


def test_versions_sorted_newest_first() -> None:
    """Versions are ordered by date descending regardless of input order"""
    policy = PolicyData(
        id="terms-001",
        type="terms",
        title="Terms",
        current_version="3.0",
        versions=[
            make_version("1.0", utc(2023, 1, 1)),
            make_version("3.0", utc(2025, 1, 1)),
            make_version("2.0", utc(2024, 1, 1)),
        ],
    )

    assert [v.version for v in policy.versions] == ["3.0", "2.0", "1.0"]


def test_duplicate_version_strings_rejected() -> None:
    with pytest.raises(ValidationError, match="duplicate version"):
        PolicyData(
            id="terms-001",
            type="terms",
            title="Terms",
            current_version="1.0",
            versions=[
                make_version("1.0", utc(2023, 1, 1)),
                make_version("1.0", utc(2024, 1, 1)),
            ],
        )


def test_current_version_mismatch_still_loads() -> None:
    """A current_version that names no version is tolerated at load time"""
    policy = PolicyData(
        id="terms-001",
        type="terms",
        title="Terms",
        current_version="9.9",
        versions=[make_version("1.0", utc(2023, 1, 1))],
    )

    assert policy.current_version == "9.9"


def test_naive_datetimes_are_treated_as_utc() -> None:
    version = PolicyVersion(
        id="v-1",
        version="1.0",
        date=datetime(2025, 1, 1),
        content="text",
        deadline=datetime(2025, 1, 15, 23, 59, 59),
    )

    assert version.date == utc(2025, 1, 1)
    assert version.deadline == utc(2025, 1, 15, 23, 59, 59)


def test_negative_grace_period_rejected() -> None:
    with pytest.raises(ValidationError):
        PolicyVersion(
            id="v-1", version="1.0", date=utc(2025, 1, 1), content="text", grace_period_days=-1
        )


def test_acceptance_is_frozen() -> None:
    record = make_acceptance("acc-1", "terms-001", "2.1", "alice", utc(2025, 1, 10))

    with pytest.raises(ValidationError):
        record.is_valid = False  # type: ignore[misc]


def test_acceptance_wire_format_is_camel_case() -> None:
    """The POST body uses camelCase keys and ISO-8601 timestamps"""
    record = make_acceptance(
        "acceptance-1",
        "terms-001",
        "2.1",
        "bob",
        utc(2025, 1, 10, 9, 30),
        acceptance_type=AcceptanceType.COMPANY,
        company_info=make_company_info(),
    )

    wire = record.to_wire()

    assert wire["id"] == "acceptance-1"
    assert wire["policyId"] == "terms-001"
    assert wire["userId"] == "bob"
    assert wire["acceptanceType"] == "company"
    assert wire["isValid"] is True
    assert wire["acceptedAt"].startswith("2025-01-10T09:30:00")
    assert wire["companyInfo"]["companyName"] == "Acme Corp"
    assert wire["companyInfo"]["acceptorEmail"] == "bob@acme.example"
    assert "revokedAt" not in wire


def test_acceptance_parses_wire_format() -> None:
    record = PolicyAcceptance.model_validate(
        {
            "id": "acceptance-7",
            "policyId": "privacy-001",
            "version": "1.0",
            "userId": "carol",
            "acceptedAt": "2025-01-02T10:00:00Z",
            "acceptanceType": "individual",
            "isValid": True,
        }
    )

    assert record.policy_id == "privacy-001"
    assert record.accepted_at == utc(2025, 1, 2, 10)
    assert record.acceptance_type == AcceptanceType.INDIVIDUAL


def test_organization_settings_accept_camel_case() -> None:
    org = OrganizationSettings.model_validate(
        {
            "requireCompanyAcceptance": True,
            "whoCanAcceptForCompany": "admins-only",
            "inheritanceRules": {"newUsersInheritCompanyAcceptance": True},
        }
    )

    assert org.require_company_acceptance is True
    assert org.who_can_accept_for_company == "admins-only"
    assert org.inheritance_rules.new_users_inherit_company_acceptance is True
