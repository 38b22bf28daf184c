"""
Policy API client - The remote half of the data source

Thin async wrapper over httpx. Every failed call, including a 2xx answer whose
body does not decode or validate, becomes one of the two error types the
orchestrator reports: FetchError for reads and SubmissionError for the
acceptance write.
"""

from collections.abc import Callable
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel

from policy_acceptance.acceptance.models import (
    Company,
    OrganizationSettings,
    PolicyAcceptance,
    PolicyData,
    User,
)
from policy_acceptance.config import ApiEndpoints, ApiSettings
from policy_acceptance.kernel.errors import FetchError, SubmissionError
from policy_acceptance.kernel.logging import LogOperation, get_logger
from policy_acceptance.kernel.metrics import (
    fetch_failures_total,
    remote_request_duration_seconds,
)
from policy_acceptance.kernel.retry import transport_retrying

logger = get_logger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


def _list_of(model: type[M]) -> Callable[[Any], list[M]]:
    def parse(data: Any) -> list[M]:
        if not isinstance(data, list):
            raise ValueError(f"expected a JSON array, got {type(data).__name__}")
        return [model.model_validate(item) for item in data]

    return parse


class PolicyApiClient:
    """
    Client for the configured policy endpoints

    The client owns its ``httpx.AsyncClient`` unless one is injected (tests
    inject one backed by ``httpx.MockTransport``).
    """

    def __init__(
        self,
        endpoints: ApiEndpoints,
        settings: ApiSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.endpoints = endpoints
        self.settings = settings or ApiSettings()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=self.settings.base_url,
            timeout=self.settings.timeout_seconds,
            headers=self.settings.headers,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it"""
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, endpoint: str, method: str, url: str, **kwargs: Any) -> httpx.Response:
        retrying = transport_retrying(self.settings.max_attempts)
        with remote_request_duration_seconds.labels(endpoint=endpoint).time():
            return await retrying(self._client.request, method, url, **kwargs)

    async def _get_json(self, resource: str, url: str | None, parse: Callable[[Any], T]) -> T:
        """
        GET ``url`` and build the result with ``parse``

        Anything short of a 2xx answer whose body decodes and fits the data
        model is a FetchError: transport failures, error statuses, bodies
        that are not JSON and payloads that fail validation.
        """
        if not url:
            raise FetchError(resource, f"No endpoint configured for {resource}")

        try:
            response = await self._request(resource, "GET", url)
        except httpx.HTTPError as e:
            fetch_failures_total.labels(resource=resource).inc()
            raise FetchError(resource, f"Failed to fetch {resource}: {e}") from e

        if not response.is_success:
            fetch_failures_total.labels(resource=resource).inc()
            raise FetchError(
                resource,
                f"Failed to fetch {resource}: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        # JSONDecodeError and pydantic's ValidationError are both ValueErrors
        try:
            return parse(response.json())
        except (TypeError, ValueError) as e:
            fetch_failures_total.labels(resource=resource).inc()
            raise FetchError(
                resource,
                f"Invalid {resource} payload: {e}",
                status_code=response.status_code,
            ) from e

    # Reads

    async def get_policies(self) -> list[PolicyData]:
        return await self._get_json(
            "policies", self.endpoints.get_policies, _list_of(PolicyData)
        )

    async def get_policy(self, policy_id: str) -> PolicyData:
        url = self.endpoints.get_policy
        return await self._get_json(
            "policy", url.format(policy_id=policy_id) if url else None, PolicyData.model_validate
        )

    async def get_user_acceptances(self, user_id: str) -> list[PolicyAcceptance]:
        url = self.endpoints.get_user_acceptances
        return await self._get_json(
            "user_acceptances",
            url.format(user_id=user_id) if url else None,
            _list_of(PolicyAcceptance),
        )

    async def get_users(self) -> list[User]:
        return await self._get_json("users", self.endpoints.get_users, _list_of(User))

    async def get_companies(self) -> list[Company]:
        return await self._get_json(
            "companies", self.endpoints.get_companies, _list_of(Company)
        )

    async def get_organization_settings(self) -> OrganizationSettings:
        return await self._get_json(
            "organization_settings",
            self.endpoints.get_organization_settings,
            OrganizationSettings.model_validate,
        )

    # Write

    async def submit_acceptance(self, record: PolicyAcceptance) -> None:
        """
        POST ``record`` to the submit endpoint

        The body is the record's wire form: camelCase keys, ISO-8601
        ``acceptedAt``, client-generated ``id``.

        Raises:
            SubmissionError: On transport failure or any non-2xx status
        """
        url = self.endpoints.submit_acceptance
        if not url:
            raise SubmissionError("No submitAcceptance endpoint configured")

        with LogOperation(
            logger,
            "submit_acceptance",
            acceptance_id=record.id,
            policy_id=record.policy_id,
            version=record.version,
        ):
            try:
                response = await self._request(
                    "submit_acceptance", "POST", url, json=record.to_wire()
                )
            except httpx.HTTPError as e:
                raise SubmissionError(f"Failed to submit acceptance: {e}") from e

            if not response.is_success:
                raise SubmissionError(
                    f"Failed to submit acceptance: {response.status_code} {response.reason_phrase}",
                    status_code=response.status_code,
                )
