"""
Pytest configuration and shared fixtures

The cast: Acme Corp with Bob (designated to bind it) and Alice (a plain
member), plus Carol who belongs to no company. The catalog holds the terms
of service (with a deadline) and a privacy policy (without one).
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from policy_acceptance.acceptance.factories import create_company, create_user
from policy_acceptance.acceptance.models import (
    Company,
    CompanyAcceptors,
    InheritanceRules,
    OrganizationSettings,
    PolicyData,
    User,
    UserRole,
)
from policy_acceptance.config import (
    DataSource,
    DataSourceType,
    LocalData,
    PolicyAcceptanceConfig,
    dump_config,
)
from policy_acceptance.kernel.ids import SequentialIdFactory
from policy_acceptance.kernel.time import TestTimeProvider
from tests.helpers import make_policy, make_version, utc


@pytest.fixture
def test_time() -> TestTimeProvider:
    """
    Provide a controllable time provider for deterministic tests

    Default time: 2025-01-15 12:00:00 UTC, a month before the terms deadline.
    """
    return TestTimeProvider(datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def id_factory() -> SequentialIdFactory:
    return SequentialIdFactory()


@pytest.fixture
def alice() -> User:
    return create_user("alice", "alice@acme.example", "Alice", company_id="acme")


@pytest.fixture
def bob() -> User:
    return create_user(
        "bob", "bob@acme.example", "Bob", role=UserRole.COMPANY_ADMIN, company_id="acme"
    )


@pytest.fixture
def carol() -> User:
    """Independent user with no company"""
    return create_user("carol", "carol@example.com", "Carol")


@pytest.fixture
def acme() -> Company:
    return create_company("acme", "Acme Corp", admin_users=["bob"])


@pytest.fixture
def individual_org() -> OrganizationSettings:
    """Users accept for themselves only"""
    return OrganizationSettings()


@pytest.fixture
def company_org() -> OrganizationSettings:
    """Designated users bind the company and members inherit the acceptance"""
    return OrganizationSettings(
        require_company_acceptance=True,
        allow_individual_acceptance=False,
        require_authority_confirmation=True,
        who_can_accept_for_company=CompanyAcceptors.DESIGNATED_USERS.value,
        inheritance_rules=InheritanceRules(new_users_inherit_company_acceptance=True),
    )


@pytest.fixture
def terms() -> PolicyData:
    """Terms of service: current version 2.1 with a 2025-02-15 deadline"""
    return make_policy(
        "terms-001",
        [
            make_version("2.0", utc(2024, 6, 1)),
            make_version("2.1", utc(2025, 1, 1), deadline=utc(2025, 2, 15, 23, 59, 59)),
        ],
        title="Terms of Service",
    )


@pytest.fixture
def privacy() -> PolicyData:
    """Privacy policy: current version 1.0, no deadline"""
    return make_policy(
        "privacy-001",
        [make_version("1.0", utc(2024, 9, 1))],
        title="Privacy Policy",
        policy_type="privacy",
    )


@pytest.fixture
def catalog(terms: PolicyData, privacy: PolicyData) -> list[PolicyData]:
    return [terms, privacy]


@pytest.fixture
def local_config(
    alice: User, bob: User, carol: User, acme: Company, catalog: list[PolicyData]
) -> PolicyAcceptanceConfig:
    """Local data source with the whole cast, acting as Alice"""
    return PolicyAcceptanceConfig(
        data_source=DataSource(
            type=DataSourceType.LOCAL,
            local_data=LocalData(
                policies=catalog,
                users=[alice, bob, carol],
                companies=[acme],
                current_user=alice,
            ),
        ),
        current_user=alice,
        current_company=acme,
        user_agent="pytest",
    )


@pytest.fixture
def config_file(tmp_path: Path, local_config: PolicyAcceptanceConfig) -> Path:
    """The local configuration written to disk as camelCase JSON"""
    path = tmp_path / "acceptance.json"
    dump_config(local_config, path)
    return path
