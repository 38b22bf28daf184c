"""
Acceptance Domain Models - Users, companies, documents and the ledger

These are plain data: pydantic validates shape, the resolvers in this package
decide meaning. Field names are snake_case in Python and camelCase on the
wire, so a record dumped with ``by_alias=True`` is exactly what the policy API
expects to receive.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from policy_acceptance.kernel.time import ensure_utc


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WireModel(BaseModel):
    """Base for every model that crosses the API boundary"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PolicyType(str, Enum):
    """Kinds of governed documents"""

    TERMS = "terms"
    PRIVACY = "privacy"
    COOKIES = "cookies"
    DATA_PROCESSING = "data-processing"
    SECURITY = "security"
    CUSTOM = "custom"


class AcceptanceType(str, Enum):
    """Whether an acceptance binds only the acceptor or their company"""

    INDIVIDUAL = "individual"
    COMPANY = "company"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
    LEGAL = "legal"
    COMPANY_ADMIN = "company-admin"


class CompanyAcceptors(str, Enum):
    """
    Recognized values of ``OrganizationSettings.who_can_accept_for_company``

    The settings field itself is a plain string: configurations from older
    or foreign sources may carry values outside this set, and the permission
    resolver must be able to see (and reject) them.
    """

    ADMINS_ONLY = "admins-only"
    DESIGNATED_USERS = "designated-users"
    ANY_USER = "any-user"


class AcceptanceScope(str, Enum):
    INDIVIDUAL = "individual"
    COMPANY_WIDE = "company-wide"
    BOTH = "both"


class AcceptanceStatus(str, Enum):
    """
    Resolved state of one document for one user

    Only PENDING and OVERDUE put a document on a user's required list.
    """

    ACCEPTED = "accepted"
    PENDING = "pending"
    OVERDUE = "overdue"
    NOT_REQUIRED = "not-required"


# Identities


class User(WireModel):
    """
    A person who can accept documents

    Attributes:
        id: Unique identifier
        role: Plain user, admin, legal or company-admin
        company_id: The single company this user belongs to (None if independent)
        can_accept_for_company: Explicit designation to bind the company
        is_active: Deactivated users keep their ledger history
    """

    id: str
    email: str
    name: str
    role: UserRole = UserRole.USER
    company_id: str | None = None
    can_accept_for_company: bool | None = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=_utcnow)
    last_login_at: datetime | None = None


class CompanySettings(WireModel):
    require_authority_confirmation: bool = True
    require_title_and_email: bool = True
    allow_delegated_acceptance: bool = False
    notification_emails: list[str] = Field(default_factory=list)


class Company(WireModel):
    """
    An organization whose designated users can bind it to documents

    ``admin_users`` is expected to reference users whose ``company_id`` is this
    company; the core does not enforce it (see invariants.validate_company_admins).
    """

    id: str
    name: str
    domain: str | None = None
    admin_users: list[str] = Field(default_factory=list)
    requires_company_acceptance: bool = True
    allow_individual_acceptance: bool = False
    settings: CompanySettings = Field(default_factory=CompanySettings)
    created_at: datetime = Field(default_factory=_utcnow)
    is_active: bool = True


# Documents


class VersionMetadata(WireModel):
    word_count: int
    reading_time_minutes: int
    language: str
    jurisdiction: str


class PolicyVersion(WireModel):
    """
    One published version of a governed document

    Attributes:
        version: Version string, unique within its document
        date: Publication date; versions are ordered by it, newest first
        deadline: Acceptance is overdue once "now" is strictly after this
        grace_period_days: Days after the deadline before downstream
            restrictions apply (carried, not interpreted by the core)
    """

    id: str
    version: str
    date: datetime
    content: str
    changes: list[str] | None = None
    is_breaking: bool | None = None
    deadline: datetime | None = None
    grace_period_days: int | None = Field(default=None, ge=0)
    is_active: bool = True
    created_by: str = "system"
    approved_by: str | None = None
    approved_at: datetime | None = None
    metadata: VersionMetadata | None = None

    @field_validator("date", "deadline", "approved_at")
    @classmethod
    def _utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None


class CompanyInfo(WireModel):
    """
    Attestation captured when someone accepts on behalf of a company

    Must be complete (validated by the caller) whenever the acceptance
    type is COMPANY.
    """

    company_name: str
    acceptor_name: str
    acceptor_title: str
    acceptor_email: str
    acceptor_user_id: str | None = None
    signature_method: str | None = None  # "click" | "typed" | "digital"
    ip_address: str | None = None
    location: str | None = None

    model_config = ConfigDict(frozen=True)


class AcceptanceMetadata(WireModel):
    session_id: str | None = None
    device_type: str | None = None
    browser_info: str | None = None

    model_config = ConfigDict(frozen=True)


class PolicyAcceptance(WireModel):
    """
    Append-only ledger entry

    Records are never edited in place and never removed. Revocation produces
    a copy with ``is_valid=False`` and the revocation fields stamped, which
    replaces the original in the ledger; every query filters on ``is_valid``.

    Attributes:
        id: Client-generated id (shared with the remote ledger)
        policy_id: Document the record belongs to
        version: Document version that was accepted
        user_id: Who clicked accept (for company acceptances, the acceptor)
        accepted_at: When the acceptance was made
        acceptance_type: INDIVIDUAL or COMPANY
        company_info: The attestation, for COMPANY acceptances
        is_valid: False once revoked
    """

    id: str
    policy_id: str
    version: str
    user_id: str
    accepted_at: datetime
    user_agent: str | None = None
    acceptance_type: AcceptanceType
    company_info: CompanyInfo | None = None
    ip_address: str | None = None
    location: str | None = None
    is_valid: bool = True
    revoked_at: datetime | None = None
    revoked_by: str | None = None
    revoked_reason: str | None = None
    metadata: AcceptanceMetadata | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("accepted_at", "revoked_at")
    @classmethod
    def _utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None

    def to_wire(self) -> dict[str, Any]:
        """JSON body for the submit endpoint (camelCase, ISO-8601 timestamps)"""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class NotificationSettings(WireModel):
    send_reminders: bool = True
    reminder_days: list[int] = Field(default_factory=lambda: [7, 3, 1])
    escalation_emails: list[str] = Field(default_factory=list)


class PolicySettings(WireModel):
    requires_acceptance: bool = True
    allow_version_rollback: bool = False
    retention_period_days: int = 2555  # 7 years
    notification_settings: NotificationSettings = Field(default_factory=NotificationSettings)


class PolicyData(WireModel):
    """
    A governed document with its versions and its acceptance ledger

    Versions are kept sorted by date, newest first, so index 0 is the current
    version. ``current_version`` should name it; a mismatch is tolerated at
    load time and resolves to NOT_REQUIRED rather than failing the catalog.

    Attributes:
        id: Document identifier
        type: Terms, privacy, security, ...
        versions: Newest first, unique by version string
        current_version: The version acceptance is evaluated against
        user_acceptances: The ledger (append-only)
        settings: Document-level acceptance and reminder settings
    """

    id: str
    type: PolicyType
    title: str
    description: str | None = None
    versions: list[PolicyVersion] = Field(default_factory=list)
    current_version: str
    user_acceptances: list[PolicyAcceptance] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    settings: PolicySettings = Field(default_factory=PolicySettings)

    model_config = ConfigDict(frozen=True)

    @field_validator("versions")
    @classmethod
    def _sorted_unique_versions(cls, versions: list[PolicyVersion]) -> list[PolicyVersion]:
        seen: set[str] = set()
        for version in versions:
            if version.version in seen:
                raise ValueError(f"duplicate version string {version.version!r}")
            seen.add(version.version)
        return sorted(versions, key=lambda v: v.date, reverse=True)


# Organization configuration


class InheritanceRules(WireModel):
    new_users_inherit_company_acceptance: bool = False
    company_acceptance_overrides_individual: bool = False


class OrganizationNotifications(WireModel):
    enabled: bool = True
    reminder_days: list[int] = Field(default_factory=lambda: [7, 3, 1])
    escalation_chain: list[str] = Field(default_factory=list)
    send_to_managers: bool = False


class AuditSettings(WireModel):
    log_all_actions: bool = True
    require_digital_signature: bool = False
    retention_period_years: int = 7
    export_format: str = "json"  # "json" | "csv" | "pdf"


class OrganizationSettings(WireModel):
    """
    Organization-wide acceptance policy

    Read-only configuration supplied by the host application.

    Attributes:
        require_company_acceptance: Whether company acceptance is used at all
        allow_individual_acceptance: Whether users may accept for themselves
        who_can_accept_for_company: One of CompanyAcceptors; other values
            deny everyone
        acceptance_scope: individual, company-wide or both
        inheritance_rules: Whether a company acceptance covers members
    """

    require_company_acceptance: bool = False
    allow_individual_acceptance: bool = True
    require_authority_confirmation: bool = False
    who_can_accept_for_company: str = CompanyAcceptors.ANY_USER.value
    require_manager_approval: bool = False
    acceptance_scope: AcceptanceScope = AcceptanceScope.INDIVIDUAL
    inheritance_rules: InheritanceRules = Field(default_factory=InheritanceRules)
    notifications: OrganizationNotifications = Field(default_factory=OrganizationNotifications)
    audit_settings: AuditSettings = Field(default_factory=AuditSettings)

    model_config = ConfigDict(frozen=True)
