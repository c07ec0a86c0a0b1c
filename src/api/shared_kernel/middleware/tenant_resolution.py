"""Tenant resolution from competing request signals.

A request may carry its tenant in several places. The resolver checks
them in a fixed order and the first non-blank value wins:

1. a claim on the authenticated principal (skipped when unauthenticated)
2. a request header
3. a route parameter
4. a query string parameter

The resolver is pure: it does not check that the tenant exists or is
active. Callers that need an active tenant look it up afterwards.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from shared_kernel.middleware.observability import (
    DefaultTenantResolutionProbe,
    TenantResolutionProbe,
)
from shared_kernel.middleware.tenant_context import TenantContext, TenantSource


@dataclass(frozen=True)
class TenantSignals:
    """Raw tenant-bearing inputs collected from one request.

    Attributes:
        authenticated: Whether ``claims`` come from a validated token.
        claims: Claims of the authenticated principal.
        headers: Request headers.
        route_params: Path parameters bound by the router.
        query_params: Query string parameters.
    """

    authenticated: bool = False
    claims: Mapping[str, Any] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    route_params: Mapping[str, Any] = field(default_factory=dict)
    query_params: Mapping[str, str] = field(default_factory=dict)


def _clean(value: Any) -> str | None:
    """Return the stripped string form of a signal, or None when blank."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is not None:
        return value
    # Plain dicts are case-sensitive; HTTP header names are not.
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


class TenantResolver:
    """Resolves the tenant of a request using fixed precedence.

    Signal names default to ``tenant_id`` (claim), ``X-Tenant-Id``
    (header), ``tenant`` (route) and ``tenant`` (query).
    """

    def __init__(
        self,
        claim_name: str = "tenant_id",
        header_name: str = "X-Tenant-Id",
        route_parameter: str = "tenant",
        query_parameter: str = "tenant",
        probe: TenantResolutionProbe | None = None,
    ) -> None:
        self._claim_name = claim_name
        self._header_name = header_name
        self._route_parameter = route_parameter
        self._query_parameter = query_parameter
        self._probe = probe or DefaultTenantResolutionProbe()

    def resolve(self, signals: TenantSignals) -> TenantContext | None:
        """Pick the tenant from the request signals.

        Args:
            signals: Inputs collected from the request.

        Returns:
            The resolved TenantContext, or None if no signal carried a
            non-blank value.
        """
        candidates: list[tuple[TenantSource, Any]] = []
        if signals.authenticated:
            candidates.append(
                (TenantSource.CLAIM, signals.claims.get(self._claim_name))
            )
        candidates.extend(
            [
                (TenantSource.HEADER, _header(signals.headers, self._header_name)),
                (TenantSource.ROUTE, signals.route_params.get(self._route_parameter)),
                (TenantSource.QUERY, signals.query_params.get(self._query_parameter)),
            ]
        )

        for source, raw in candidates:
            value = _clean(raw)
            if value is not None:
                self._probe.tenant_resolved(tenant=value, source=source.value)
                return TenantContext(tenant=value, source=source)

        self._probe.tenant_unresolved(authenticated=signals.authenticated)
        return None
