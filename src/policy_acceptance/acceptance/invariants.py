"""
Acceptance Invariants - Checks callers run before touching the orchestrator

The orchestrator trusts its inputs. These functions are what the form layer
(or any other caller) uses to make sure it never submits a company
acceptance with a partial attestation. They are pure and side-effect free.
"""

from datetime import datetime

from policy_acceptance.acceptance.models import (
    AcceptanceType,
    Company,
    CompanyInfo,
    PolicyVersion,
    User,
)
from policy_acceptance.kernel.errors import AttestationValidationError


def validate_company_attestation(
    acceptance_type: AcceptanceType,
    company_info: CompanyInfo | None,
    has_authority: bool,
) -> None:
    """
    Ensure a company acceptance carries a complete attestation

    Individual acceptances need nothing. Company acceptances need a company
    name, the acceptor's name, title and email (none blank), and the
    acceptor's confirmation that they have authority to bind the company.

    Args:
        acceptance_type: Type the caller is about to submit
        company_info: Attestation collected from the acceptor
        has_authority: The authority confirmation checkbox

    Raises:
        AttestationValidationError: Listing every missing field
    """
    if acceptance_type == AcceptanceType.INDIVIDUAL:
        return

    missing: list[str] = []
    if company_info is None:
        missing.extend(["company_name", "acceptor_name", "acceptor_title", "acceptor_email"])
    else:
        for field in ("company_name", "acceptor_name", "acceptor_title", "acceptor_email"):
            if not getattr(company_info, field).strip():
                missing.append(field)

    if not has_authority:
        missing.append("authority_confirmation")

    if missing:
        raise AttestationValidationError(missing)


def is_attestation_complete(
    acceptance_type: AcceptanceType,
    company_info: CompanyInfo | None,
    has_authority: bool,
) -> bool:
    """Boolean form of validate_company_attestation, for enabling an accept button"""
    try:
        validate_company_attestation(acceptance_type, company_info, has_authority)
    except AttestationValidationError:
        return False
    return True


# Record sanity checks


def validate_policy_version(version: PolicyVersion) -> bool:
    """A version needs an id, a version string, content and a date"""
    return bool(
        version.id
        and version.version
        and version.content
        and isinstance(version.date, datetime)
    )


def validate_user(user: User) -> bool:
    """A user needs an id, a name and an email that looks like one"""
    return bool(user.id and user.name and user.email and "@" in user.email)


def validate_company(company: Company) -> bool:
    """A company needs an id and a name"""
    return bool(company.id and company.name)


def validate_company_admins(company: Company, users: list[User]) -> list[str]:
    """
    Admin user ids that do not reference a member of ``company``

    The core never enforces this relationship; hosts that want to can call
    this when loading their directory.

    Returns:
        Offending user ids, in ``admin_users`` order (empty when consistent)
    """
    members = {u.id for u in users if u.company_id == company.id}
    return [user_id for user_id in company.admin_users if user_id not in members]
