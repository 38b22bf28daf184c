"""
Test Helper Functions - Builders for documents, ledgers and API fakes

Keeps tests readable: a version, an acceptance record or a whole
configuration can be built in one line with only the fields a test cares
about spelled out.
"""

import json
from datetime import datetime, timezone
from typing import Any, Callable

import httpx

from policy_acceptance.acceptance.factories import create_policy_data
from policy_acceptance.acceptance.models import (
    AcceptanceType,
    CompanyInfo,
    PolicyAcceptance,
    PolicyData,
    PolicyVersion,
)


def utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc)


def make_version(
    version: str,
    date: datetime,
    deadline: datetime | None = None,
    content: str = "Policy text",
) -> PolicyVersion:
    """Builder for a document version; the id is derived from the version string"""
    return PolicyVersion(
        id=f"v-{version}",
        version=version,
        date=date,
        content=content,
        deadline=deadline,
    )


def make_company_info(company_name: str = "Acme Corp", **overrides: Any) -> CompanyInfo:
    fields: dict[str, Any] = {
        "company_name": company_name,
        "acceptor_name": "Bob Builder",
        "acceptor_title": "General Counsel",
        "acceptor_email": "bob@acme.example",
    }
    fields.update(overrides)
    return CompanyInfo(**fields)


def make_acceptance(
    acceptance_id: str,
    policy_id: str,
    version: str,
    user_id: str,
    accepted_at: datetime,
    acceptance_type: AcceptanceType = AcceptanceType.INDIVIDUAL,
    company_info: CompanyInfo | None = None,
    is_valid: bool = True,
) -> PolicyAcceptance:
    """
    Builder for ledger records

    Example:
        >>> make_acceptance("acc-1", "terms-001", "2.1", "alice", utc(2025, 1, 10))
    """
    return PolicyAcceptance(
        id=acceptance_id,
        policy_id=policy_id,
        version=version,
        user_id=user_id,
        accepted_at=accepted_at,
        acceptance_type=acceptance_type,
        company_info=company_info,
        is_valid=is_valid,
    )


def make_policy(
    policy_id: str,
    versions: list[PolicyVersion],
    acceptances: list[PolicyAcceptance] | None = None,
    title: str | None = None,
    policy_type: str = "terms",
    **settings: Any,
) -> PolicyData:
    """Builder for a document; keyword arguments override PolicySettings fields"""
    return create_policy_data(
        policy_id,
        policy_type,
        title or f"Policy {policy_id}",
        versions,
        user_acceptances=acceptances,
        settings=settings or None,
        now=utc(2024, 1, 1),
    )


class RecordingTransport:
    """
    httpx.MockTransport handler that records requests and serves canned routes

    Routes map "METHOD path" to (status, json body); a bytes body is served
    raw. Unrouted requests get 404.
    """

    def __init__(self, routes: dict[str, tuple[int, Any]] | None = None) -> None:
        self.routes = routes or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = f"{request.method} {request.url.path}"
        if key not in self.routes:
            return httpx.Response(404, json={"error": "not found"})
        status, body = self.routes[key]
        if isinstance(body, bytes):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    def client(self, base_url: str = "https://api.example.com") -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self), base_url=base_url)

    def bodies(self, method: str = "POST") -> list[Any]:
        return [json.loads(r.content) for r in self.requests if r.method == method]


def failing_transport(exc_factory: Callable[[httpx.Request], Exception]) -> httpx.AsyncClient:
    """AsyncClient whose every request raises the exception built by ``exc_factory``"""

    def handler(request: httpx.Request) -> httpx.Response:
        raise exc_factory(request)

    return httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="https://api.example.com"
    )
