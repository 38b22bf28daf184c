"""
Acceptance Module - Documents, the acceptance ledger and its resolvers

- Domain models (users, companies, documents, ledger records)
- Permission Resolver (who may bind a company)
- Status Resolver (accepted / pending / overdue / not-required)
- Required-Documents Aggregator
- Pure ledger operations (append, revoke) used by the orchestrator
"""

from policy_acceptance.acceptance.models import (
    AcceptanceScope,
    AcceptanceStatus,
    AcceptanceType,
    Company,
    CompanyAcceptors,
    CompanyInfo,
    OrganizationSettings,
    PolicyAcceptance,
    PolicyData,
    PolicyType,
    PolicyVersion,
    User,
    UserRole,
)
from policy_acceptance.acceptance.permissions import can_accept_for_company
from policy_acceptance.acceptance.requirements import required_policies
from policy_acceptance.acceptance.status import resolve_status

__all__ = [
    "AcceptanceScope",
    "AcceptanceStatus",
    "AcceptanceType",
    "Company",
    "CompanyAcceptors",
    "CompanyInfo",
    "OrganizationSettings",
    "PolicyAcceptance",
    "PolicyData",
    "PolicyType",
    "PolicyVersion",
    "User",
    "UserRole",
    "can_accept_for_company",
    "required_policies",
    "resolve_status",
]
