"""
Configuration - Everything the host application hands the orchestrator

The configuration is built once per session and read-only afterwards. Data
sections (data source, organization, identities, behavior) are plain
pydantic models that round-trip through JSON; callbacks and integrations are
named optional handler slots attached in code.

Example:
    >>> config = individual_only_config(create_user("u-1", "ann@example.com", "Ann"))
    >>> config.callbacks.on_acceptance = lambda record: print(record.id)
"""

import json
from collections.abc import Awaitable, Callable
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from policy_acceptance.acceptance.models import (
    AcceptanceScope,
    AuditSettings,
    Company,
    CompanyAcceptors,
    InheritanceRules,
    OrganizationNotifications,
    OrganizationSettings,
    PolicyAcceptance,
    PolicyData,
    User,
    WireModel,
)


class DataSourceType(str, Enum):
    LOCAL = "local"
    API = "api"
    HYBRID = "hybrid"


class ApiEndpoints(WireModel):
    """Absolute URLs (or paths relative to ``ApiSettings.base_url``)"""

    get_policies: str | None = None
    get_policy: str | None = None  # may contain "{policy_id}"
    submit_acceptance: str | None = None
    get_user_acceptances: str | None = None  # may contain "{user_id}"
    get_users: str | None = None
    get_companies: str | None = None
    get_organization_settings: str | None = None


class ApiSettings(WireModel):
    """
    Transport settings for the policy API

    Attributes:
        base_url: Prefix for relative endpoint paths
        timeout_seconds: Per-request timeout
        headers: Extra headers sent with every request (e.g. Authorization)
        max_attempts: Attempts per request on transport errors (1 = no retry)
    """

    base_url: str = ""
    timeout_seconds: float = Field(default=10.0, gt=0)
    headers: dict[str, str] = Field(default_factory=dict)
    max_attempts: int = Field(default=1, ge=1, le=10)


class LocalData(WireModel):
    policies: list[PolicyData] = Field(default_factory=list)
    users: list[User] = Field(default_factory=list)
    companies: list[Company] = Field(default_factory=list)
    current_user: User | None = None


class DataSource(WireModel):
    type: DataSourceType = DataSourceType.LOCAL
    api_endpoints: ApiEndpoints | None = None
    local_data: LocalData | None = None
    api: ApiSettings = Field(default_factory=ApiSettings)


class Behavior(WireModel):
    """Presentation behavior; persisted with the config, ignored by the core"""

    auto_show_on_login: bool = False
    block_access_until_accepted: bool = False
    allow_later_review: bool = True
    require_scroll_to_bottom: bool = True
    session_timeout: int | None = None


# Handler slots

# Return value of a notification handler; awaited when it is awaitable
HandlerResult = Awaitable[None] | None


class Callbacks(BaseModel):
    """
    Named handler slots, invoked in a fixed order

    - before_acceptance(candidate) -> bool | Awaitable[bool]: veto hook, runs
      before anything is written
    - on_acceptance(record): after commit
    - on_decline(policy_id, reason)
    - on_error(error, context): context is "acceptPolicy", "refreshData", ...
    - on_user_action(action, data)

    Any handler may be sync or async.
    """

    on_acceptance: Callable[[PolicyAcceptance], HandlerResult] | None = None
    on_decline: Callable[[str, str | None], HandlerResult] | None = None
    on_error: Callable[[Exception, str | None], HandlerResult] | None = None
    on_user_action: Callable[[str, Any], HandlerResult] | None = None
    before_acceptance: Callable[[PolicyAcceptance], bool | Awaitable[bool]] | None = None

    model_config = ConfigDict(validate_assignment=True)


class AnalyticsIntegration(BaseModel):
    track_acceptance: Callable[[Any], HandlerResult] | None = None
    track_decline: Callable[[Any], HandlerResult] | None = None
    track_view: Callable[[Any], HandlerResult] | None = None


class NotificationIntegration(BaseModel):
    send_email: Callable[[list[str], str, str], HandlerResult] | None = None
    send_slack: Callable[[str, str], HandlerResult] | None = None


class AuditIntegration(BaseModel):
    log_action: Callable[[str, Any], HandlerResult] | None = None


class Integrations(BaseModel):
    analytics: AnalyticsIntegration | None = None
    notifications: NotificationIntegration | None = None
    audit: AuditIntegration | None = None


class PolicyAcceptanceConfig(WireModel):
    """
    Session configuration for the acceptance orchestrator

    Attributes:
        data_source: Where the catalog comes from and where acceptances go
        organization: Organization acceptance policy
        current_user: The acting identity
        current_company: The acting identity's company, if any
        behavior: Presentation settings (not consumed by the core)
        callbacks: Host callbacks
        integrations: Analytics, notification and audit hooks
        user_agent: Stamped on acceptance records created in this session
        slack_channel: Channel for escalation messages, when Slack is wired
    """

    data_source: DataSource = Field(default_factory=DataSource)
    organization: OrganizationSettings = Field(default_factory=OrganizationSettings)
    current_user: User
    current_company: Company | None = None
    behavior: Behavior = Field(default_factory=Behavior)
    callbacks: Callbacks = Field(default_factory=Callbacks, exclude=True)
    integrations: Integrations = Field(default_factory=Integrations, exclude=True)
    user_agent: str | None = None
    slack_channel: str | None = None


def load_config(path: str | Path) -> PolicyAcceptanceConfig:
    """Read a JSON configuration file (camelCase or snake_case keys)"""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return PolicyAcceptanceConfig.model_validate(data)


def dump_config(config: PolicyAcceptanceConfig, path: str | Path) -> None:
    """Write the data sections of ``config`` as camelCase JSON"""
    payload = config.model_dump(by_alias=True, mode="json", exclude_none=True)
    Path(path).write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


# Presets for common organizational setups


def _local_source(current_user: User, current_company: Company | None) -> DataSource:
    return DataSource(
        type=DataSourceType.LOCAL,
        local_data=LocalData(
            users=[current_user],
            companies=[current_company] if current_company else [],
            current_user=current_user,
        ),
    )


def individual_only_config(current_user: User, **overrides: Any) -> PolicyAcceptanceConfig:
    """Users accept for themselves; company acceptance is not used"""
    fields: dict[str, Any] = {
        "data_source": _local_source(current_user, None),
        "organization": OrganizationSettings(
            require_company_acceptance=False,
            allow_individual_acceptance=True,
            require_authority_confirmation=False,
            who_can_accept_for_company=CompanyAcceptors.ANY_USER.value,
            acceptance_scope=AcceptanceScope.INDIVIDUAL,
            inheritance_rules=InheritanceRules(),
            notifications=OrganizationNotifications(reminder_days=[7, 3, 1]),
            audit_settings=AuditSettings(retention_period_years=7, export_format="json"),
        ),
        "current_user": current_user,
        "behavior": Behavior(
            auto_show_on_login=False,
            block_access_until_accepted=False,
            allow_later_review=True,
        ),
    }
    fields.update(overrides)
    return PolicyAcceptanceConfig(**fields)


def company_only_config(
    current_user: User, current_company: Company, **overrides: Any
) -> PolicyAcceptanceConfig:
    """Designated users bind the company and every member inherits it"""
    fields: dict[str, Any] = {
        "data_source": _local_source(current_user, current_company),
        "organization": OrganizationSettings(
            require_company_acceptance=True,
            allow_individual_acceptance=False,
            require_authority_confirmation=True,
            who_can_accept_for_company=CompanyAcceptors.DESIGNATED_USERS.value,
            acceptance_scope=AcceptanceScope.COMPANY_WIDE,
            inheritance_rules=InheritanceRules(
                new_users_inherit_company_acceptance=True,
                company_acceptance_overrides_individual=True,
            ),
            notifications=OrganizationNotifications(
                reminder_days=[14, 7, 3, 1],
                escalation_chain=list(current_company.admin_users),
                send_to_managers=True,
            ),
            audit_settings=AuditSettings(
                require_digital_signature=True,
                retention_period_years=10,
                export_format="pdf",
            ),
        ),
        "current_user": current_user,
        "current_company": current_company,
        "behavior": Behavior(
            auto_show_on_login=True,
            block_access_until_accepted=True,
            allow_later_review=False,
        ),
    }
    fields.update(overrides)
    return PolicyAcceptanceConfig(**fields)


def hybrid_config(
    current_user: User, current_company: Company, **overrides: Any
) -> PolicyAcceptanceConfig:
    """Both individual and company acceptance; no inheritance"""
    fields: dict[str, Any] = {
        "data_source": _local_source(current_user, current_company),
        "organization": OrganizationSettings(
            require_company_acceptance=True,
            allow_individual_acceptance=True,
            require_authority_confirmation=True,
            who_can_accept_for_company=CompanyAcceptors.DESIGNATED_USERS.value,
            acceptance_scope=AcceptanceScope.BOTH,
            inheritance_rules=InheritanceRules(),
            notifications=OrganizationNotifications(
                reminder_days=[7, 3, 1],
                escalation_chain=list(current_company.admin_users),
                send_to_managers=True,
            ),
            audit_settings=AuditSettings(retention_period_years=7, export_format="json"),
        ),
        "current_user": current_user,
        "current_company": current_company,
    }
    fields.update(overrides)
    return PolicyAcceptanceConfig(**fields)
