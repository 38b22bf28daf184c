"""
Prometheus metrics for policy acceptance.

Counts what the orchestrator does to the ledger and how its collaborators
(remote API, integrations) behave.
"""

from prometheus_client import Counter, Histogram

# ============================================================================
# Ledger Metrics
# ============================================================================

acceptance_attempts_total = Counter(
    "policy_acceptance_attempts_total",
    "Acceptance attempts by outcome",
    ["acceptance_type", "outcome"],  # outcome: committed, vetoed, failed, discarded
)

declines_total = Counter(
    "policy_declines_total",
    "Total number of declined policies",
)

revocations_total = Counter(
    "policy_acceptance_revocations_total",
    "Total number of revoked acceptance records",
)

# ============================================================================
# Collaborator Metrics
# ============================================================================

integration_failures_total = Counter(
    "policy_integration_failures_total",
    "Failures raised by callbacks and integrations (swallowed)",
    ["integration"],
)

fetch_failures_total = Counter(
    "policy_fetch_failures_total",
    "Failed loads from the policy API",
    ["resource"],
)

remote_request_duration_seconds = Histogram(
    "policy_remote_request_duration_seconds",
    "Duration of requests to the policy API",
    ["endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

reminders_sent_total = Counter(
    "policy_reminders_sent_total",
    "Reminder and escalation emails handed to the notification integration",
    ["kind"],  # kind: reminder, escalation
)
