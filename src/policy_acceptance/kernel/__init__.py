"""
Kernel - Shared infrastructure for the acceptance engine

Errors, injectable time and id generation, structured logging, metrics and
the transport retry policy. Nothing in here knows about policies.
"""

from policy_acceptance.kernel.errors import (
    AcceptanceAlreadyRevoked,
    AcceptanceNotFound,
    AttestationValidationError,
    FetchError,
    PolicyAcceptanceError,
    PolicyNotFound,
    SubmissionError,
    VetoedAcceptance,
)
from policy_acceptance.kernel.ids import IdFactory, generate_acceptance_id, generate_id
from policy_acceptance.kernel.time import RealTimeProvider, TestTimeProvider, TimeProvider

__all__ = [
    # IDs
    "IdFactory",
    "generate_id",
    "generate_acceptance_id",
    # Time
    "TimeProvider",
    "RealTimeProvider",
    "TestTimeProvider",
    # Errors
    "PolicyAcceptanceError",
    "AttestationValidationError",
    "VetoedAcceptance",
    "SubmissionError",
    "FetchError",
    "PolicyNotFound",
    "AcceptanceNotFound",
    "AcceptanceAlreadyRevoked",
]
