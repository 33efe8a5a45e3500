"""License status probe."""

from __future__ import annotations

import logging
from typing import Any

from fortigate_exporter.client import FortiHTTPError
from fortigate_exporter.metrics import Desc, Metric, ProbeError, ValueType
from fortigate_exporter.version import TargetMetadata

log = logging.getLogger(__name__)

_PATH = "api/v2/monitor/license/status/select"

_VDOM_USED = Desc("fortigate_license_vdom_usage", "The amount of VDOM licenses currently used")
_VDOM_MAX = Desc("fortigate_license_vdom_max", "The total amount of VDOM licenses available")


def probe_license_status(client: Any, meta: TargetMetadata) -> list[Metric]:
    """Report VDOM license usage and capacity."""
    try:
        response = client.get(_PATH, "")
    except FortiHTTPError as exc:
        log.error("Error: %s", exc)
        raise ProbeError(str(exc)) from exc
    if response is None:
        response = {}
    if not isinstance(response, dict):
        raise ProbeError(f'unexpected response shape (path: "{_PATH}")')

    vdom = (response.get("results") or {}).get("vdom") or {}
    return [
        _VDOM_USED.metric(ValueType.GAUGE, vdom.get("used") or 0),
        _VDOM_MAX.metric(ValueType.GAUGE, vdom.get("max") or 0),
    ]