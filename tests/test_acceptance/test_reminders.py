"""
Tests for Reminder Evaluation - Deadline nudges and overdue escalation
"""

from policy_acceptance.acceptance.models import (
    AcceptanceType,
    OrganizationNotifications,
    OrganizationSettings,
    PolicyData,
    User,
)
from policy_acceptance.acceptance.reminders import due_reminders, overdue_escalations
from tests.helpers import make_acceptance, make_company_info, make_policy, make_version, utc


def security_policy(**settings) -> PolicyData:
    """Security policy whose deadline is 2025-01-22 12:00 UTC"""
    return make_policy(
        "sec-001",
        [make_version("1.0", utc(2025, 1, 1), deadline=utc(2025, 1, 22, 12))],
        title="Security Policy",
        policy_type="security",
        **settings,
    )


def test_reminder_due_on_configured_day(
    alice: User, carol: User, individual_org: OrganizationSettings
) -> None:
    catalog = [security_policy()]

    reminders = due_reminders(catalog, [alice, carol], individual_org, utc(2025, 1, 15, 12))

    assert [(r.user_id, r.days_left) for r in reminders] == [("alice", 7), ("carol", 7)]
    assert reminders[0].email == "alice@acme.example"
    assert reminders[0].version == "1.0"


def test_no_reminder_between_configured_days(
    alice: User, individual_org: OrganizationSettings
) -> None:
    catalog = [security_policy()]

    assert due_reminders(catalog, [alice], individual_org, utc(2025, 1, 17, 12)) == []


def test_no_reminder_for_accepted_or_inactive_users(
    alice: User, carol: User, individual_org: OrganizationSettings
) -> None:
    accepted = security_policy().model_copy(
        update={
            "user_acceptances": [
                make_acceptance("acc-1", "sec-001", "1.0", "alice", utc(2025, 1, 2))
            ]
        }
    )
    inactive = carol.model_copy(update={"is_active": False})

    assert due_reminders([accepted], [alice, inactive], individual_org, utc(2025, 1, 15, 12)) == []


def test_no_reminder_when_disabled_or_no_deadline(
    alice: User, privacy: PolicyData, individual_org: OrganizationSettings
) -> None:
    disabled = security_policy(notification_settings={"send_reminders": False})

    assert (
        due_reminders([disabled, privacy], [alice], individual_org, utc(2025, 1, 15, 12)) == []
    )


def test_inherited_company_acceptance_suppresses_reminder(
    alice: User, company_org: OrganizationSettings
) -> None:
    binding = make_acceptance(
        "acc-1",
        "sec-001",
        "1.0",
        "bob",
        utc(2025, 1, 2),
        acceptance_type=AcceptanceType.COMPANY,
        company_info=make_company_info(),
    )
    policy = security_policy().model_copy(update={"user_acceptances": [binding]})

    assert due_reminders([policy], [alice], company_org, utc(2025, 1, 15, 12)) == []


def test_overdue_escalation_recipients_deduplicated(alice: User) -> None:
    policy = security_policy(
        notification_settings={"escalation_emails": ["compliance@acme.example", "ciso@acme.example"]}
    )
    org = OrganizationSettings(
        notifications=OrganizationNotifications(
            escalation_chain=["ciso@acme.example", "ceo@acme.example"]
        )
    )

    escalations = overdue_escalations([policy], [alice], org, utc(2025, 2, 1))

    assert len(escalations) == 1
    assert escalations[0].user_id == "alice"
    assert escalations[0].recipients == [
        "compliance@acme.example",
        "ciso@acme.example",
        "ceo@acme.example",
    ]


def test_no_escalation_without_recipients_or_before_deadline(alice: User) -> None:
    org = OrganizationSettings(
        notifications=OrganizationNotifications(escalation_chain=["ceo@acme.example"])
    )

    assert overdue_escalations([security_policy()], [alice], OrganizationSettings(), utc(2025, 2, 1)) == []
    assert overdue_escalations([security_policy()], [alice], org, utc(2025, 1, 15)) == []
