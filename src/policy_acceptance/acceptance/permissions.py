"""
Permission Resolver - Who may bind a company

Pure function of (user, company, organization settings). Unknown acceptor
policies fail closed.
"""

from policy_acceptance.acceptance.models import (
    Company,
    CompanyAcceptors,
    OrganizationSettings,
    User,
    UserRole,
)

_ADMIN_ROLES = frozenset({UserRole.ADMIN, UserRole.COMPANY_ADMIN})


def can_accept_for_company(
    user: User,
    company: Company,
    org_settings: OrganizationSettings,
) -> bool:
    """
    Decide whether ``user`` may create a binding acceptance for ``company``

    Args:
        user: The would-be acceptor
        company: The company to be bound
        org_settings: Organization acceptance policy

    Returns:
        False whenever the organization does not use company acceptance;
        otherwise the answer of the configured acceptor policy:

        - admins-only: role is admin or company-admin
        - designated-users: listed in ``company.admin_users`` or explicitly
          flagged ``can_accept_for_company``
        - any-user: member of the company
        - anything else: False
    """
    if not org_settings.require_company_acceptance:
        return False

    policy = org_settings.who_can_accept_for_company

    if policy == CompanyAcceptors.ADMINS_ONLY:
        return user.role in _ADMIN_ROLES
    if policy == CompanyAcceptors.DESIGNATED_USERS:
        return user.id in company.admin_users or user.can_accept_for_company is True
    if policy == CompanyAcceptors.ANY_USER:
        return user.company_id == company.id
    return False
