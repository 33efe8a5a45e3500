"""Log disk usage and FortiAnalyzer probes."""

from __future__ import annotations

import logging
from typing import Any

from fortigate_exporter.client import FortiHTTPError
from fortigate_exporter.metrics import Desc, Metric, ProbeError, ValueType
from fortigate_exporter.version import TargetMetadata

log = logging.getLogger(__name__)

_LOG_USED = Desc("fortigate_log_disk_used_bytes", "Disk used bytes for log", ("vdom",))
_LOG_TOTAL = Desc("fortigate_log_disk_total_bytes", "Disk total bytes for log", ("vdom",))

_ANA_INFO = Desc(
    "fortigate_log_fortianalyzer_registration_info",
    "Fortianalyzer state info",
    ("vdom", "registration", "connection"),
)
_ANA_RECEIVED = Desc(
    "fortigate_log_fortianalyzer_logs_received", "Received logs in fortianalyzer", ("vdom",)
)

_QUEUE_CONN = Desc(
    "fortigate_log_fortianalyzer_queue_connections",
    "Fortianalyzer queue connected state",
    ("vdom",),
)
_QUEUE_LOGS = Desc(
    "fortigate_log_fortianalyzer_queue_logs", "State of logs in the queue", ("vdom", "state")
)


def _fetch(client: Any, path: str) -> list[tuple[str, dict[str, Any]]]:
    """Return (vdom, results) pairs from a per-VDOM endpoint."""
    try:
        responses = client.get(path, "vdom=*")
    except FortiHTTPError as exc:
        log.error("Error: %s", exc)
        raise ProbeError(str(exc)) from exc
    if responses is None:
        return []
    if not isinstance(responses, list):
        raise ProbeError(f'unexpected response shape (path: "{path}")')
    return [
        (str(response.get("vdom") or ""), response.get("results") or {})
        for response in responses
    ]


def probe_log_current_disk_usage(client: Any, meta: TargetMetadata) -> list[Metric]:
    """Report used and total log disk bytes per VDOM."""
    metrics = []
    for vdom, results in _fetch(client, "api/v2/monitor/log/current-disk-usage"):
        metrics.append(_LOG_USED.metric(ValueType.GAUGE, results.get("used_bytes") or 0, vdom))
        metrics.append(_LOG_TOTAL.metric(ValueType.GAUGE, results.get("total_bytes") or 0, vdom))
    return metrics


def probe_log_analyzer(client: Any, meta: TargetMetadata) -> list[Metric]:
    """Report FortiAnalyzer registration state and received logs per VDOM."""
    metrics = []
    for vdom, results in _fetch(client, "api/v2/monitor/log/fortianalyzer"):
        metrics.append(
            _ANA_INFO.metric(
                ValueType.GAUGE,
                1,
                vdom,
                str(results.get("registration") or ""),
                str(results.get("connection") or ""),
            )
        )
        metrics.append(_ANA_RECEIVED.metric(ValueType.GAUGE, results.get("received") or 0, vdom))
    return metrics


def probe_log_analyzer_queue(client: Any, meta: TargetMetadata) -> list[Metric]:
    """Report FortiAnalyzer queue connection state and queued logs per VDOM."""
    metrics = []
    for vdom, results in _fetch(client, "api/v2/monitor/log/fortianalyzer-queue"):
        metrics.append(_QUEUE_CONN.metric(ValueType.GAUGE, results.get("connected") or 0, vdom))
        # Failed and cached logs are treated as gauges.
        metrics.append(
            _QUEUE_LOGS.metric(ValueType.GAUGE, results.get("failed_logs") or 0, vdom, "failed")
        )
        metrics.append(
            _QUEUE_LOGS.metric(ValueType.GAUGE, results.get("cached_logs") or 0, vdom, "cached")
        )
    return metrics