"""
Tests for Configuration - presets, JSON round trip, handler slots
"""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from policy_acceptance.acceptance.models import AcceptanceScope, Company, CompanyAcceptors, User
from policy_acceptance.config import (
    ApiSettings,
    Callbacks,
    DataSourceType,
    PolicyAcceptanceConfig,
    company_only_config,
    dump_config,
    hybrid_config,
    individual_only_config,
    load_config,
)


def test_individual_only_preset(alice: User) -> None:
    config = individual_only_config(alice)

    assert config.organization.require_company_acceptance is False
    assert config.organization.acceptance_scope == AcceptanceScope.INDIVIDUAL
    assert config.data_source.type == DataSourceType.LOCAL
    assert config.data_source.local_data.current_user == alice
    assert config.current_company is None


def test_company_only_preset(bob: User, acme: Company) -> None:
    config = company_only_config(bob, acme)

    org = config.organization
    assert org.require_company_acceptance is True
    assert org.allow_individual_acceptance is False
    assert org.who_can_accept_for_company == CompanyAcceptors.DESIGNATED_USERS.value
    assert org.inheritance_rules.new_users_inherit_company_acceptance is True
    assert org.notifications.reminder_days == [14, 7, 3, 1]
    assert org.notifications.escalation_chain == ["bob"]
    assert config.behavior.block_access_until_accepted is True


def test_hybrid_preset(bob: User, acme: Company) -> None:
    config = hybrid_config(bob, acme)

    assert config.organization.acceptance_scope == AcceptanceScope.BOTH
    assert config.organization.allow_individual_acceptance is True
    assert config.organization.inheritance_rules.new_users_inherit_company_acceptance is False


def test_preset_overrides(alice: User) -> None:
    config = individual_only_config(alice, user_agent="cli/1.0")

    assert config.user_agent == "cli/1.0"


def test_dump_and_load_round_trip(config_file: Path, local_config: PolicyAcceptanceConfig) -> None:
    raw = json.loads(config_file.read_text())
    assert "dataSource" in raw
    assert "currentUser" in raw
    assert "callbacks" not in raw

    loaded = load_config(config_file)

    assert loaded.current_user.id == "alice"
    assert [p.id for p in loaded.data_source.local_data.policies] == ["terms-001", "privacy-001"]
    assert loaded.data_source.local_data.policies == local_config.data_source.local_data.policies


def test_load_snake_case_config(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "current_user": {"id": "u-1", "email": "u@example.com", "name": "U"},
                "data_source": {
                    "type": "api",
                    "api_endpoints": {"get_policies": "https://api.example.com/policies"},
                },
            }
        )
    )

    config = load_config(path)

    assert config.data_source.type == DataSourceType.API
    assert config.data_source.api_endpoints.get_policies == "https://api.example.com/policies"


def test_config_requires_current_user() -> None:
    with pytest.raises(ValidationError):
        PolicyAcceptanceConfig()


def test_api_settings_bounds() -> None:
    with pytest.raises(ValidationError):
        ApiSettings(max_attempts=0)
    with pytest.raises(ValidationError):
        ApiSettings(timeout_seconds=0)


def test_callback_slots_reject_non_callables() -> None:
    callbacks = Callbacks()

    with pytest.raises(ValidationError):
        callbacks.on_acceptance = "not callable"  # type: ignore[assignment]
