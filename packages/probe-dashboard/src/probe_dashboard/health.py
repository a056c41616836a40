"""
Dashboard status payload schemas.

The dashboard's GET /api/status reports an overall token plus one entry
per plugin or core service. The shape changed between major versions:

Schema A (7.x line, variant V1):
    {"status": {"overall": {"state": "green"},
                "statuses": [{"id": "plugin:security", "state": "green", "message": "Ready"}]}}

Schema B (8.x line, variant V2):
    {"status": {"overall": {"level": "available"},
                "plugins": {"security": {"level": "available", "summary": "All services are available"}}}}

Every field the health evaluation depends on is required. A payload that
lacks one is a parse failure, never an implicit "healthy".
"""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel

from probe_core.constants import DASHBOARD_HEALTHY_LEVEL, DASHBOARD_HEALTHY_STATE
from probe_core.transport import parse_model
from probe_core.version import Variant
from probe_protocols import HealthResult, HealthState


# =============================================================================
# Schema A
# =============================================================================


class OverallStateA(BaseModel):
    state: str


class ComponentStatusA(BaseModel):
    id: str
    state: str
    message: str


class StatusBodyA(BaseModel):
    overall: OverallStateA
    statuses: list[ComponentStatusA]


class StatusResponseA(BaseModel):
    """Response from GET /api/status, 7.x line."""

    status: StatusBodyA


# =============================================================================
# Schema B
# =============================================================================


class OverallLevelB(BaseModel):
    level: str


class PluginStatusB(BaseModel):
    level: str
    summary: str


class StatusBodyB(BaseModel):
    overall: OverallLevelB
    plugins: dict[str, PluginStatusB]


class StatusResponseB(BaseModel):
    """Response from GET /api/status, 8.x line."""

    status: StatusBodyB


# =============================================================================
# Evaluation
# =============================================================================


def _result(overall: str, healthy_token: str, reasons: dict[str, str]) -> HealthResult:
    if overall == healthy_token and not reasons:
        state = HealthState.READY
    else:
        state = HealthState.DEGRADED
    return HealthResult(state=state, overall=overall, reasons=reasons)


def parse_status_a(payload: Any) -> HealthResult:
    """
    Evaluate a schema A payload.

    Every status entry whose state is not "green" contributes a reason
    "<state>,<message>" keyed by the entry's id.

    Raises:
        ResponseParseError: If a required field is missing.
    """
    response = parse_model(StatusResponseA, payload, "dashboard status")
    reasons = {
        entry.id: f"{entry.state},{entry.message}"
        for entry in response.status.statuses
        if entry.state != DASHBOARD_HEALTHY_STATE
    }
    return _result(response.status.overall.state, DASHBOARD_HEALTHY_STATE, reasons)


def parse_status_b(payload: Any) -> HealthResult:
    """
    Evaluate a schema B payload.

    Every plugin whose level is not "available" contributes a reason
    "<level>,<summary>" keyed by the plugin name.

    Raises:
        ResponseParseError: If a required field is missing.
    """
    response = parse_model(StatusResponseB, payload, "dashboard status")
    reasons = {
        name: f"{plugin.level},{plugin.summary}"
        for name, plugin in response.status.plugins.items()
        if plugin.level != DASHBOARD_HEALTHY_LEVEL
    }
    return _result(response.status.overall.level, DASHBOARD_HEALTHY_LEVEL, reasons)


STATUS_PARSERS: dict[Variant, Callable[[Any], HealthResult]] = {
    Variant.V1: parse_status_a,
    Variant.V2: parse_status_b,
}
