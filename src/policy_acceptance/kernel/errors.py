"""
Custom exceptions for policy acceptance

Every failure the core can report has a named type carrying the identifiers
it concerns, so callers (and the orchestrator's error callback) can tell a
rejected attestation from a failed submission without parsing messages.
"""


class PolicyAcceptanceError(Exception):
    """Base exception for all policy acceptance errors"""

    pass


class AttestationValidationError(PolicyAcceptanceError):
    """
    Raised when a company attestation is incomplete

    This is a caller-level check (the form layer runs it before invoking the
    orchestrator). The orchestrator itself trusts its inputs.
    """

    def __init__(self, missing_fields: list[str]) -> None:
        self.missing_fields = missing_fields
        super().__init__(
            "Company attestation is incomplete - missing: " + ", ".join(missing_fields)
        )


class VetoedAcceptance(PolicyAcceptanceError):
    """
    The pre-commit hook declined an acceptance

    Never raised across the orchestrator boundary: a veto is a deliberate
    no-op and is reported as the ``vetoed`` outcome instead.
    """

    def __init__(self, policy_id: str, version: str) -> None:
        self.policy_id = policy_id
        self.version = version
        super().__init__(f"Acceptance of {policy_id} v{version} vetoed by before_acceptance")


class SubmissionError(PolicyAcceptanceError):
    """Raised when the remote acceptance write fails (transport or status)"""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class FetchError(PolicyAcceptanceError):
    """Raised when loading policies, users or companies from the API fails"""

    def __init__(self, resource: str, message: str, status_code: int | None = None) -> None:
        self.resource = resource
        self.status_code = status_code
        super().__init__(message)


class PolicyNotFound(PolicyAcceptanceError):
    """Raised when a policy id is not in the catalog"""

    def __init__(self, policy_id: str) -> None:
        self.policy_id = policy_id
        super().__init__(f"Policy {policy_id} not found")


class AcceptanceNotFound(PolicyAcceptanceError):
    """Raised when an acceptance id is not in any ledger"""

    def __init__(self, acceptance_id: str) -> None:
        self.acceptance_id = acceptance_id
        super().__init__(f"Acceptance {acceptance_id} not found")


class AcceptanceAlreadyRevoked(PolicyAcceptanceError):
    """Raised when revoking a record that is already invalid"""

    def __init__(self, acceptance_id: str) -> None:
        self.acceptance_id = acceptance_id
        super().__init__(f"Acceptance {acceptance_id} is already revoked")
