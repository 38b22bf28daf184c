"""
Policy Acceptance - Tracking who accepted which version of which document

Users accept versioned policy documents (terms, privacy, security, ...) for
themselves, and authorized users accept on behalf of their company. Every
acceptance lands in an append-only ledger; status, requirement and permission
questions are answered by pure resolvers over that ledger, and a single
orchestrator coordinates remote submission, local commit and notifications.
"""

from policy_acceptance.config import PolicyAcceptanceConfig, load_config
from policy_acceptance.orchestrator import (
    AcceptanceOrchestrator,
    AcceptanceOutcome,
    OutcomeStatus,
)

__version__ = "0.1.0"
__all__ = [
    "AcceptanceOrchestrator",
    "AcceptanceOutcome",
    "OutcomeStatus",
    "PolicyAcceptanceConfig",
    "load_config",
    "__version__",
]
