"""Firewall IP pool probe."""

from __future__ import annotations

import logging
from typing import Any

from fortigate_exporter.client import FortiHTTPError
from fortigate_exporter.metrics import Desc, Metric, ProbeError, ValueType
from fortigate_exporter.version import TargetMetadata

log = logging.getLogger(__name__)

_PATH = "api/v2/monitor/firewall/ippool"
_LABELS = ("vdom", "name")

_AVAILABLE = Desc("fortigate_ippool_available_ratio", "Percentage available in ippool (0 - 1.0)", _LABELS)
_IP_USED = Desc("fortigate_ippool_used_ips", "Ip addresses in use in ippool", _LABELS)
_IP_TOTAL = Desc("fortigate_ippool_total_ips", "Ip addresses total in ippool", _LABELS)
_CLIENTS = Desc("fortigate_ippool_clients", "Amount of clients using ippool", _LABELS)
_USED = Desc("fortigate_ippool_used_items", "Amount of items used in ippool", _LABELS)
_TOTAL = Desc("fortigate_ippool_total_items", "Amount of items total in ippool", _LABELS)


def probe_firewall_ippool(client: Any, meta: TargetMetadata) -> list[Metric]:
    """Report usage of every firewall IP pool."""
    try:
        responses = client.get(_PATH, "vdom=*")
    except FortiHTTPError as exc:
        log.error("Error: %s", exc)
        raise ProbeError(str(exc)) from exc
    if responses is None:
        responses = []
    if not isinstance(responses, list):
        raise ProbeError(f'unexpected response shape (path: "{_PATH}")')

    metrics = []
    for response in responses:
        vdom = str(response.get("vdom") or "")
        for pool in (response.get("results") or {}).values():
            name = str(pool.get("name") or "")
            gauge = ValueType.GAUGE
            metrics.extend(
                [
                    _AVAILABLE.metric(gauge, float(pool.get("available") or 0) / 100, vdom, name),
                    _IP_USED.metric(gauge, pool.get("natip_in_use") or 0, vdom, name),
                    _IP_TOTAL.metric(gauge, pool.get("natip_total") or 0, vdom, name),
                    _CLIENTS.metric(gauge, pool.get("clients") or 0, vdom, name),
                    _USED.metric(gauge, pool.get("used") or 0, vdom, name),
                    _TOTAL.metric(gauge, pool.get("total") or 0, vdom, name),
                ]
            )
    return metrics