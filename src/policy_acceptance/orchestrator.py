"""
Acceptance Orchestrator - The single write path into the ledger

This is the primary interface of the package. It owns the catalog snapshot,
answers identity-based queries through the pure resolvers, and coordinates
every change: veto hook, remote write, local commit, notifications.

Example:
    >>> orchestrator = AcceptanceOrchestrator(config)
    >>> await orchestrator.initialize()
    >>> orchestrator.get_policy_acceptance_status("terms-001")
    <AcceptanceStatus.PENDING: 'pending'>
    >>> outcome = await orchestrator.accept_policy("terms-001", "2.1", "individual")
    >>> outcome.status
    <OutcomeStatus.COMMITTED: 'committed'>
"""

import inspect
from collections.abc import Callable
from enum import Enum
from typing import Any

import httpx
from pydantic import BaseModel

from policy_acceptance.acceptance.ledger import (
    find_policy,
    record_acceptance,
    revoke_acceptance,
    user_acceptances,
    visible_acceptances,
)
from policy_acceptance.acceptance.models import (
    AcceptanceStatus,
    AcceptanceType,
    Company,
    CompanyInfo,
    OrganizationSettings,
    PolicyAcceptance,
    PolicyData,
    User,
)
from policy_acceptance.acceptance.permissions import can_accept_for_company
from policy_acceptance.acceptance.reminders import due_reminders, overdue_escalations
from policy_acceptance.acceptance.requirements import required_policies
from policy_acceptance.acceptance.status import resolve_status
from policy_acceptance.config import DataSourceType, PolicyAcceptanceConfig
from policy_acceptance.kernel.errors import (
    FetchError,
    PolicyAcceptanceError,
    PolicyNotFound,
    SubmissionError,
    VetoedAcceptance,
)
from policy_acceptance.kernel.ids import IdFactory, default_id_factory
from policy_acceptance.kernel.logging import (
    LogOperation,
    bind_attempt,
    get_logger,
)
from policy_acceptance.kernel.metrics import (
    acceptance_attempts_total,
    declines_total,
    integration_failures_total,
    reminders_sent_total,
    revocations_total,
)
from policy_acceptance.kernel.time import RealTimeProvider, TimeProvider, to_iso
from policy_acceptance.transport import PolicyApiClient

logger = get_logger(__name__)


class OutcomeStatus(str, Enum):
    COMMITTED = "committed"  # written remotely (if configured) and locally
    VETOED = "vetoed"  # before_acceptance declined; nothing happened
    FAILED = "failed"  # error reported; ledger untouched
    DISCARDED = "discarded"  # orchestrator closed while the request was in flight


class AcceptanceOutcome(BaseModel):
    """Result of accept_policy; the orchestrator never raises instead"""

    status: OutcomeStatus
    acceptance: PolicyAcceptance | None = None
    error: str | None = None

    @property
    def committed(self) -> bool:
        return self.status == OutcomeStatus.COMMITTED


class ReminderRun(BaseModel):
    reminders_sent: int = 0
    escalations_sent: int = 0


async def _resolve(value: Any) -> Any:
    """Await ``value`` if a handler returned an awaitable"""
    if inspect.isawaitable(value):
        return await value
    return value


class AcceptanceOrchestrator:
    """
    Stateful coordinator for one session

    Holds the configuration (read-only), the acting identity, and the catalog
    snapshot (the only mutable state). Queries are synchronous; the
    operations that may touch the network are coroutines and are meant to be
    awaited one at a time.
    """

    def __init__(
        self,
        config: PolicyAcceptanceConfig,
        time_provider: TimeProvider | None = None,
        id_factory: IdFactory | None = None,
        api_client: PolicyApiClient | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            config: Session configuration
            time_provider: Clock for timestamps and status (real time if None)
            id_factory: Acceptance id generator
            api_client: Pre-built API client (built from config if None)
            http_client: httpx client to build the API client with (tests)
        """
        self.config = config
        self.time_provider = time_provider or RealTimeProvider()
        self.id_factory = id_factory or default_id_factory

        local = config.data_source.local_data
        self._policies: list[PolicyData] = list(local.policies) if local else []
        self._users: list[User] = list(local.users) if local else []
        self._companies: list[Company] = list(local.companies) if local else []

        endpoints = config.data_source.api_endpoints
        if api_client is None and endpoints is not None:
            api_client = PolicyApiClient(endpoints, config.data_source.api, http_client)
        self._api = api_client

        self.is_loading = False
        self.error: str | None = None
        self._closed = False

    # Snapshot accessors

    @property
    def policies(self) -> list[PolicyData]:
        return self._policies

    @property
    def users(self) -> list[User]:
        return self._users

    @property
    def companies(self) -> list[Company]:
        return self._companies

    @property
    def current_user(self) -> User:
        return self.config.current_user

    @property
    def current_company(self) -> Company | None:
        return self.config.current_company

    @property
    def organization_settings(self) -> OrganizationSettings:
        return self.config.organization

    def get_policy(self, policy_id: str) -> PolicyData | None:
        return find_policy(self._policies, policy_id)

    def _find_user(self, user_id: str) -> User | None:
        for user in self._users:
            if user.id == user_id:
                return user
        if user_id == self.current_user.id:
            return self.current_user
        return None

    def _find_company(self, company_id: str | None) -> Company | None:
        if company_id is None:
            return None
        for company in self._companies:
            if company.id == company_id:
                return company
        if self.current_company is not None and self.current_company.id == company_id:
            return self.current_company
        return None

    # Queries

    def can_user_accept_for_company(
        self, user_id: str, company_id: str | None = None
    ) -> bool:
        """Permission check by id; unknown user or company -> False"""
        user = self._find_user(user_id)
        if user is None:
            return False
        company = self._find_company(company_id or user.company_id)
        if company is None:
            return False
        return can_accept_for_company(user, company, self.config.organization)

    def get_policy_acceptance_status(
        self, policy_id: str, user_id: str | None = None
    ) -> AcceptanceStatus:
        """Status by id (current user by default); unknown ids -> NOT_REQUIRED"""
        policy = self.get_policy(policy_id)
        user = self._find_user(user_id or self.current_user.id)
        if policy is None or user is None:
            return AcceptanceStatus.NOT_REQUIRED
        return resolve_status(
            policy, user, self.config.organization, self.time_provider.now()
        )

    def get_required_policies(self, user_id: str | None = None) -> list[PolicyData]:
        user = self._find_user(user_id or self.current_user.id)
        if user is None:
            return []
        return required_policies(
            self._policies, user, self.config.organization, self.time_provider.now()
        )

    def get_user_acceptances(self, user_id: str | None = None) -> list[PolicyAcceptance]:
        return user_acceptances(self._policies, user_id or self.current_user.id)

    def get_visible_acceptances(self, policy_id: str) -> list[PolicyAcceptance]:
        policy = self.get_policy(policy_id)
        if policy is None:
            return []
        return visible_acceptances(policy, self.config.organization)

    # Handler plumbing

    async def _notify(self, name: str, handler: Callable[..., Any] | None, *args: Any) -> bool:
        """
        Invoke one post-commit handler in isolation

        Failures are logged and counted, never propagated: a broken analytics
        hook must not undo or block an acceptance that already happened.

        Returns:
            True if the handler ran to completion
        """
        if handler is None:
            return False
        try:
            await _resolve(handler(*args))
            return True
        except Exception as e:
            integration_failures_total.labels(integration=name).inc()
            logger.warning(
                "Integration handler failed",
                integration=name,
                error=str(e),
                exc_info=True,
            )
            return False

    async def _report_error(self, error: Exception, context: str) -> None:
        self.error = str(error)
        logger.error("Operation failed", context=context, error=str(error))
        await self._notify("on_error", self.config.callbacks.on_error, error, context)

    # Acceptance

    async def accept_policy(
        self,
        policy_id: str,
        version: str,
        acceptance_type: AcceptanceType | str,
        company_info: CompanyInfo | None = None,
    ) -> AcceptanceOutcome:
        """
        Record that the current user accepts ``version`` of ``policy_id``

        Protocol:
        1. Build the candidate record (new id, now, valid)
        2. before_acceptance veto hook; a falsy answer is a silent no-op
        3. Remote write when submitAcceptance is configured; on failure the
           error is reported and the local ledger is left alone
        4. Append to the document's ledger (catalog replaced by value)
        5. on_acceptance, analytics, audit; each isolated from the others

        Callers must validate company attestations beforehand (see
        acceptance.invariants.validate_company_attestation) and must not
        start a second acceptance while one is in flight.

        Returns:
            AcceptanceOutcome; this coroutine does not raise for reported errors
        """
        bind_attempt(policy_id=policy_id, version=version)
        acceptance_type = AcceptanceType(acceptance_type)
        callbacks = self.config.callbacks

        if self.get_policy(policy_id) is None:
            error = PolicyNotFound(policy_id)
            await self._report_error(error, "acceptPolicy")
            return self._finish(acceptance_type, OutcomeStatus.FAILED, error=error)

        candidate = PolicyAcceptance(
            id=self.id_factory.generate(),
            policy_id=policy_id,
            version=version,
            user_id=self.current_user.id,
            accepted_at=self.time_provider.now(),
            user_agent=self.config.user_agent,
            acceptance_type=acceptance_type,
            company_info=company_info,
            is_valid=True,
        )

        if callbacks.before_acceptance is not None:
            try:
                proceed = await _resolve(callbacks.before_acceptance(candidate))
            except Exception as e:
                await self._report_error(e, "beforeAcceptance")
                return self._finish(acceptance_type, OutcomeStatus.FAILED, candidate, e)
            if not proceed:
                logger.info(
                    "Acceptance vetoed by before_acceptance",
                    policy_id=policy_id,
                    version=version,
                )
                return self._finish(
                    acceptance_type,
                    OutcomeStatus.VETOED,
                    candidate,
                    VetoedAcceptance(policy_id, version),
                )

        endpoints = self.config.data_source.api_endpoints
        if self._api is not None and endpoints is not None and endpoints.submit_acceptance:
            self.is_loading = True
            try:
                await self._api.submit_acceptance(candidate)
            except SubmissionError as e:
                if self._closed:
                    return self._finish(acceptance_type, OutcomeStatus.DISCARDED, candidate)
                await self._report_error(e, "acceptPolicy")
                return self._finish(acceptance_type, OutcomeStatus.FAILED, candidate, e)
            finally:
                self.is_loading = False

        if self._closed:
            logger.info("Orchestrator closed, discarding acceptance", acceptance_id=candidate.id)
            return self._finish(acceptance_type, OutcomeStatus.DISCARDED, candidate)

        self._policies = record_acceptance(self._policies, candidate)
        logger.info(
            "Acceptance committed",
            acceptance_id=candidate.id,
            policy_id=policy_id,
            version=version,
            acceptance_type=acceptance_type.value,
            user_id=candidate.user_id,
        )

        integrations = self.config.integrations
        analytics = integrations.analytics
        audit = integrations.audit
        await self._notify("on_acceptance", callbacks.on_acceptance, candidate)
        await self._notify(
            "analytics.track_acceptance",
            analytics.track_acceptance if analytics else None,
            candidate,
        )
        await self._notify(
            "audit.log_action",
            audit.log_action if audit else None,
            "policy_accepted",
            candidate,
        )

        return self._finish(acceptance_type, OutcomeStatus.COMMITTED, candidate)

    def _finish(
        self,
        acceptance_type: AcceptanceType,
        status: OutcomeStatus,
        acceptance: PolicyAcceptance | None = None,
        error: Exception | None = None,
    ) -> AcceptanceOutcome:
        acceptance_attempts_total.labels(
            acceptance_type=acceptance_type.value, outcome=status.value
        ).inc()
        return AcceptanceOutcome(
            status=status,
            acceptance=acceptance,
            error=str(error) if error is not None else None,
        )

    async def decline_policy(self, policy_id: str, reason: str | None = None) -> None:
        """
        Report that the current user declined ``policy_id``

        Nothing is written to the ledger; a decline is only announced to the
        decline callback, analytics and audit.
        """
        decline_data = {
            "policy_id": policy_id,
            "user_id": self.current_user.id,
            "declined_at": to_iso(self.time_provider.now()),
            "reason": reason,
        }
        declines_total.inc()
        logger.info("Policy declined", policy_id=policy_id, user_id=self.current_user.id)

        integrations = self.config.integrations
        analytics = integrations.analytics
        audit = integrations.audit
        await self._notify("on_decline", self.config.callbacks.on_decline, policy_id, reason)
        await self._notify(
            "analytics.track_decline",
            analytics.track_decline if analytics else None,
            decline_data,
        )
        await self._notify(
            "audit.log_action",
            audit.log_action if audit else None,
            "policy_declined",
            decline_data,
        )

    async def revoke_acceptance(
        self,
        acceptance_id: str,
        revoked_by: str | None = None,
        reason: str | None = None,
    ) -> PolicyAcceptance | None:
        """
        Invalidate one acceptance record in the local ledger

        The record stays in the ledger with ``is_valid=False``; statuses that
        depended on it reopen immediately.

        Returns:
            The revoked record, or None when the revocation was rejected
            (unknown id, already revoked); the error is reported
        """
        try:
            self._policies, revoked = revoke_acceptance(
                self._policies,
                acceptance_id,
                revoked_by=revoked_by or self.current_user.id,
                revoked_at=self.time_provider.now(),
                reason=reason,
            )
        except PolicyAcceptanceError as e:
            await self._report_error(e, "revokeAcceptance")
            return None

        revocations_total.inc()
        logger.info(
            "Acceptance revoked",
            acceptance_id=acceptance_id,
            policy_id=revoked.policy_id,
            revoked_by=revoked.revoked_by,
        )
        audit = self.config.integrations.audit
        await self._notify(
            "audit.log_action",
            audit.log_action if audit else None,
            "policy_acceptance_revoked",
            revoked,
        )
        return revoked

    async def record_view(self, policy_id: str, version: str | None = None) -> None:
        """Announce that the current user opened a document"""
        policy = self.get_policy(policy_id)
        view_data = {
            "policy_id": policy_id,
            "version": version or (policy.current_version if policy else None),
            "user_id": self.current_user.id,
            "viewed_at": to_iso(self.time_provider.now()),
        }
        analytics = self.config.integrations.analytics
        await self._notify(
            "analytics.track_view",
            analytics.track_view if analytics else None,
            view_data,
        )
        await self._notify(
            "on_user_action", self.config.callbacks.on_user_action, "policy_viewed", view_data
        )

    # Data source

    async def initialize(self) -> None:
        """Load the catalog when the data source is API-backed"""
        if self.config.data_source.type == DataSourceType.API:
            await self.refresh_data()

    async def refresh_data(self) -> bool:
        """
        Reload the catalog (and users/companies when their endpoints exist)

        A no-op for local data sources and when getPolicies is not configured.
        On failure the previous snapshot is kept and the error reported with
        context "refreshData"; there is no automatic retry.

        Returns:
            True if a new snapshot was installed
        """
        endpoints = self.config.data_source.api_endpoints
        if (
            self.config.data_source.type == DataSourceType.LOCAL
            or self._api is None
            or endpoints is None
            or not endpoints.get_policies
        ):
            return False

        self.is_loading = True
        self.error = None
        try:
            with LogOperation(logger, "refresh_data"):
                policies = await self._api.get_policies()
                users = await self._api.get_users() if endpoints.get_users else None
                companies = (
                    await self._api.get_companies() if endpoints.get_companies else None
                )
        except FetchError as e:
            if not self._closed:
                await self._report_error(e, "refreshData")
            return False
        finally:
            self.is_loading = False

        if self._closed:
            return False

        self._policies = policies
        if users is not None:
            self._users = users
        if companies is not None:
            self._companies = companies
        return True

    # Reminders

    def _directory(self) -> list[User]:
        users = list(self._users)
        if all(u.id != self.current_user.id for u in users):
            users.append(self.current_user)
        return users

    async def send_reminders(self) -> ReminderRun:
        """
        Email deadline reminders and escalate overdue documents

        Uses the notification integration; does nothing when organization
        notifications are disabled or no email sender is wired.
        """
        run = ReminderRun()
        notifications = self.config.integrations.notifications
        if (
            not self.config.organization.notifications.enabled
            or notifications is None
            or notifications.send_email is None
        ):
            return run

        now = self.time_provider.now()
        users = self._directory()

        for reminder in due_reminders(self._policies, users, self.config.organization, now):
            sent = await self._notify(
                "notifications.send_email",
                notifications.send_email,
                [reminder.email],
                f"Reminder: {reminder.policy_title} v{reminder.version}",
                f"Please review and accept {reminder.policy_title} "
                f"(version {reminder.version}). {reminder.days_left} day(s) left.",
            )
            if sent:
                run.reminders_sent += 1
                reminders_sent_total.labels(kind="reminder").inc()

        for escalation in overdue_escalations(
            self._policies, users, self.config.organization, now
        ):
            message = (
                f"User {escalation.user_id} has not accepted "
                f"{escalation.policy_title} v{escalation.version} and is overdue."
            )
            sent = await self._notify(
                "notifications.send_email",
                notifications.send_email,
                escalation.recipients,
                f"Overdue: {escalation.policy_title} v{escalation.version}",
                message,
            )
            if sent:
                run.escalations_sent += 1
                reminders_sent_total.labels(kind="escalation").inc()
            if self.config.slack_channel:
                await self._notify(
                    "notifications.send_slack",
                    notifications.send_slack,
                    self.config.slack_channel,
                    message,
                )

        return run

    async def aclose(self) -> None:
        """
        Close the session

        Results of requests still in flight are discarded when they arrive.
        """
        self._closed = True
        if self._api is not None:
            await self._api.aclose()
