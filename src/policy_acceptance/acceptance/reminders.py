"""
Reminder Evaluation - Who should be nudged, and who should be escalated

Pure evaluation over the catalog: these functions decide which reminders
are due at a given instant; sending them is the orchestrator's job. Status
comes from the Status Resolver, so a user covered by an inherited company
acceptance is never reminded.
"""

from datetime import datetime

from pydantic import BaseModel

from policy_acceptance.acceptance.models import (
    AcceptanceStatus,
    OrganizationSettings,
    PolicyData,
    User,
)
from policy_acceptance.acceptance.status import (
    days_until_deadline,
    find_current_version,
    resolve_status,
)


class DueReminder(BaseModel):
    """A pending document whose deadline is a configured number of days away"""

    policy_id: str
    policy_title: str
    version: str
    user_id: str
    email: str
    days_left: int


class DueEscalation(BaseModel):
    """An overdue document, reported to the escalation recipients"""

    policy_id: str
    policy_title: str
    version: str
    user_id: str
    recipients: list[str]


def due_reminders(
    catalog: list[PolicyData],
    users: list[User],
    org_settings: OrganizationSettings,
    now: datetime,
) -> list[DueReminder]:
    """
    Evaluate which users should receive a deadline reminder right now

    A reminder is due when:
    - the document has reminders enabled and a deadline on its current version
    - the user is active and the document is PENDING for them
    - the whole days left before the deadline equal one of the document's
      ``reminder_days`` (e.g. 7, 3, 1)

    Args:
        catalog: Documents with ledgers
        users: Directory of users to evaluate
        org_settings: Organization rules (inheritance matters here)
        now: Evaluation time

    Returns:
        Reminders in catalog order, then user order
    """
    reminders: list[DueReminder] = []

    for policy in catalog:
        notification = policy.settings.notification_settings
        if not notification.send_reminders:
            continue
        current = find_current_version(policy)
        if current is None or current.deadline is None:
            continue

        days_left = days_until_deadline(current.deadline, now)
        if days_left not in notification.reminder_days:
            continue

        for user in users:
            if not user.is_active:
                continue
            if resolve_status(policy, user, org_settings, now) != AcceptanceStatus.PENDING:
                continue
            reminders.append(
                DueReminder(
                    policy_id=policy.id,
                    policy_title=policy.title,
                    version=current.version,
                    user_id=user.id,
                    email=user.email,
                    days_left=days_left,
                )
            )

    return reminders


def overdue_escalations(
    catalog: list[PolicyData],
    users: list[User],
    org_settings: OrganizationSettings,
    now: datetime,
) -> list[DueEscalation]:
    """
    Evaluate which (document, user) pairs are overdue and must be escalated

    Recipients are the document's escalation emails followed by the
    organization's escalation chain, without duplicates. Pairs with nobody
    to escalate to are skipped.
    """
    escalations: list[DueEscalation] = []

    for policy in catalog:
        recipients = list(
            dict.fromkeys(
                policy.settings.notification_settings.escalation_emails
                + org_settings.notifications.escalation_chain
            )
        )
        if not recipients:
            continue
        current = find_current_version(policy)
        if current is None:
            continue

        for user in users:
            if not user.is_active:
                continue
            if resolve_status(policy, user, org_settings, now) != AcceptanceStatus.OVERDUE:
                continue
            escalations.append(
                DueEscalation(
                    policy_id=policy.id,
                    policy_title=policy.title,
                    version=current.version,
                    user_id=user.id,
                    recipients=recipients,
                )
            )

    return escalations
