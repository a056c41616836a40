"""
Dashboard health probing.

- DashboardClientBuilder: builds a client for the dashboard service
- DashboardClientV1 / DashboardClientV2: status evaluation per schema
- STATUS_PARSERS: variant -> payload evaluator
"""

from probe_dashboard.builder import DashboardClientBuilder
from probe_dashboard.client import (
    CLIENT_VARIANTS,
    DashboardClientV1,
    DashboardClientV2,
)
from probe_dashboard.health import (
    STATUS_PARSERS,
    StatusResponseA,
    StatusResponseB,
    parse_status_a,
    parse_status_b,
)

__all__ = [
    "DashboardClientBuilder",
    "CLIENT_VARIANTS",
    "DashboardClientV1",
    "DashboardClientV2",
    "STATUS_PARSERS",
    "StatusResponseA",
    "StatusResponseB",
    "parse_status_a",
    "parse_status_b",
]
