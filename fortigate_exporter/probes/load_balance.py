"""Firewall load balancer (virtual and real server) probe."""

from __future__ import annotations

import logging
import math
from typing import Any

from fortigate_exporter.client import FortiHTTPError
from fortigate_exporter.metrics import Desc, Metric, ProbeError, ValueType
from fortigate_exporter.version import TargetMetadata

log = logging.getLogger(__name__)

# Pagination is not implemented; at most 1000 entries are requested.
_PATH = "api/v2/monitor/firewall/load-balance"
_QUERY = "vdom=*&start=0&count=1000"

_REAL_LABELS = ("vdom", "virtual_server", "id")

_VIRTUAL_SERVER_INFO = Desc(
    "fortigate_lb_virtual_server_info",
    "Info metric regarding virtual servers",
    ("vdom", "name", "ip", "port", "type"),
)
_REAL_SERVER_INFO = Desc(
    "fortigate_lb_real_server_info",
    "Info metric regarding real servers",
    ("vdom", "virtual_server", "id", "ip", "port"),
)
_REAL_SERVER_MODE = Desc(
    "fortigate_lb_real_server_mode",
    "Mode of this real server: active, standby or disabled",
    ("vdom", "virtual_server", "id", "mode"),
)
_REAL_SERVER_STATUS = Desc(
    "fortigate_lb_real_server_status",
    "Status of this real server: up, down or unknown",
    ("vdom", "virtual_server", "id", "state"),
)
_REAL_SERVER_SESSIONS = Desc(
    "fortigate_lb_real_server_active_sessions",
    "Number of sessions active on this real server",
    _REAL_LABELS,
)
_REAL_SERVER_RTT = Desc(
    "fortigate_lb_real_server_rtt_seconds",
    "Round Trip Time (RTT) for this real server. A RTT of 1 ms or less is reported as "
    "1 ms (0.001 s). A RTT of -1 indicates a parsing error.",
    _REAL_LABELS,
)
_REAL_SERVER_BYTES = Desc(
    "fortigate_lb_real_server_processed_bytes_total",
    "Number of bytes processed by this real server",
    _REAL_LABELS,
)

_MODES = ("active", "standby", "disabled")


def parse_rtt(rtt: str) -> float:
    """Convert a RTT in milliseconds as reported by the API to seconds.

    ``"<1"`` becomes 0.001; an empty or unparsable value becomes NaN.
    """
    if rtt == "<1":
        return 0.001
    if rtt == "":
        return math.nan
    try:
        return float(rtt) / 1000
    except ValueError as exc:
        log.warning("Failed to parse RTT value: %s", exc)
        return math.nan


def _fetch(client: Any) -> list[dict[str, Any]]:
    try:
        data = client.get(_PATH, _QUERY)
    except FortiHTTPError as exc:
        log.error("Error: %s", exc)
        raise ProbeError(str(exc)) from exc
    if data is None:
        return []
    if not isinstance(data, list):
        raise ProbeError(f'unexpected response shape (path: "{_PATH}")')
    return data


def _real_server_metrics(vdom: str, virtual_name: str, real: dict[str, Any]) -> list[Metric]:
    server_id = str(int(real.get("real_server_id") or 0))
    mode = real.get("mode")
    status = real.get("status")
    if status not in ("up", "down"):
        status = "unknown"
    rtt = real.get("RTT")
    rtt_value = parse_rtt("" if rtt is None else str(rtt))
    gauge = ValueType.GAUGE

    metrics = [
        _REAL_SERVER_INFO.metric(
            gauge,
            1,
            vdom,
            virtual_name,
            server_id,
            str(real.get("real_server_ip") or ""),
            str(int(real.get("real_server_port") or 0)),
        )
    ]
    metrics.extend(
        _REAL_SERVER_MODE.metric(gauge, 1.0 if mode == m else 0.0, vdom, virtual_name, server_id, m)
        for m in _MODES
    )
    metrics.extend(
        _REAL_SERVER_STATUS.metric(
            gauge, 1.0 if status == s else 0.0, vdom, virtual_name, server_id, s
        )
        for s in ("up", "down", "unknown")
    )
    metrics.append(
        _REAL_SERVER_SESSIONS.metric(
            gauge, real.get("active_sessions") or 0, vdom, virtual_name, server_id
        )
    )
    metrics.append(_REAL_SERVER_RTT.metric(gauge, rtt_value, vdom, virtual_name, server_id))
    metrics.append(
        _REAL_SERVER_BYTES.metric(
            ValueType.COUNTER, real.get("bytes_processed") or 0, vdom, virtual_name, server_id
        )
    )
    return metrics


def probe_firewall_load_balance(client: Any, meta: TargetMetadata) -> list[Metric]:
    """Report virtual servers and the state of their real servers."""
    if meta.version_major < 6 or (meta.version_major == 6 and meta.version_minor < 4):
        # Before 6.4.0 there is no real_server_id.
        return []

    metrics = []
    for response in _fetch(client):
        vdom = str(response.get("vdom") or "")
        for virtual in response.get("results") or []:
            name = str(virtual.get("virtual_server_name") or "")
            metrics.append(
                _VIRTUAL_SERVER_INFO.metric(
                    ValueType.GAUGE,
                    1,
                    vdom,
                    name,
                    str(virtual.get("virtual_server_ip") or ""),
                    str(int(virtual.get("virtual_server_port") or 0)),
                    str(virtual.get("virtual_server_type") or ""),
                )
            )
            for real in virtual.get("list") or []:
                metrics.extend(_real_server_metrics(vdom, name, real))
    return metrics