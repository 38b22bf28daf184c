"""
Ledger operations - Pure transformations of the catalog snapshot

Documents and acceptance records are frozen, so every change yields new
values: the touched document is rebuilt and swapped into a new catalog list,
everything else is shared by reference. Records are only ever appended or
replaced by their revoked copy, never dropped.
"""

from datetime import datetime

from policy_acceptance.acceptance.models import (
    AcceptanceType,
    CompanyAcceptors,
    OrganizationSettings,
    PolicyAcceptance,
    PolicyData,
)
from policy_acceptance.kernel.errors import (
    AcceptanceAlreadyRevoked,
    AcceptanceNotFound,
    PolicyNotFound,
)


def find_policy(catalog: list[PolicyData], policy_id: str) -> PolicyData | None:
    """Get a document by id"""
    for policy in catalog:
        if policy.id == policy_id:
            return policy
    return None


def append_acceptance(policy: PolicyData, record: PolicyAcceptance) -> PolicyData:
    """Return ``policy`` with ``record`` appended to its ledger"""
    return policy.model_copy(
        update={"user_acceptances": [*policy.user_acceptances, record]}
    )


def replace_policy(catalog: list[PolicyData], policy: PolicyData) -> list[PolicyData]:
    """
    Swap the document with ``policy.id`` for ``policy``, keeping catalog order

    Raises:
        PolicyNotFound: If the catalog holds no document with that id
    """
    if find_policy(catalog, policy.id) is None:
        raise PolicyNotFound(policy.id)
    return [policy if p.id == policy.id else p for p in catalog]


def record_acceptance(
    catalog: list[PolicyData], record: PolicyAcceptance
) -> list[PolicyData]:
    """
    Append ``record`` to the ledger of the document it names

    Raises:
        PolicyNotFound: If ``record.policy_id`` is not in the catalog
    """
    policy = find_policy(catalog, record.policy_id)
    if policy is None:
        raise PolicyNotFound(record.policy_id)
    return replace_policy(catalog, append_acceptance(policy, record))


def revoke_acceptance(
    catalog: list[PolicyData],
    acceptance_id: str,
    revoked_by: str,
    revoked_at: datetime,
    reason: str | None = None,
) -> tuple[list[PolicyData], PolicyAcceptance]:
    """
    Soft-delete one acceptance record

    The record stays in the ledger at the same position; its replacement has
    ``is_valid=False`` and the revocation fields stamped.

    Returns:
        (new catalog, revoked record)

    Raises:
        AcceptanceNotFound: If no ledger holds ``acceptance_id``
        AcceptanceAlreadyRevoked: If the record is already invalid
    """
    for policy in catalog:
        for index, record in enumerate(policy.user_acceptances):
            if record.id != acceptance_id:
                continue
            if not record.is_valid:
                raise AcceptanceAlreadyRevoked(acceptance_id)

            revoked = record.model_copy(
                update={
                    "is_valid": False,
                    "revoked_at": revoked_at,
                    "revoked_by": revoked_by,
                    "revoked_reason": reason,
                }
            )
            ledger = list(policy.user_acceptances)
            ledger[index] = revoked
            updated = policy.model_copy(update={"user_acceptances": ledger})
            return replace_policy(catalog, updated), revoked

    raise AcceptanceNotFound(acceptance_id)


def user_acceptances(catalog: list[PolicyData], user_id: str) -> list[PolicyAcceptance]:
    """Valid acceptance records of ``user_id`` across the whole catalog"""
    return [
        acceptance
        for policy in catalog
        for acceptance in policy.user_acceptances
        if acceptance.user_id == user_id and acceptance.is_valid
    ]


def visible_acceptances(
    policy: PolicyData, org_settings: OrganizationSettings
) -> list[PolicyAcceptance]:
    """
    Acceptance history a viewer of ``policy`` is shown

    When anyone in a company may bind it, company records are hidden from
    the history and only individual acceptances are listed.
    """
    if org_settings.who_can_accept_for_company != CompanyAcceptors.ANY_USER:
        return list(policy.user_acceptances)
    return [
        a for a in policy.user_acceptances if a.acceptance_type == AcceptanceType.INDIVIDUAL
    ]
