"""Firewall policy statistics probe."""

from __future__ import annotations

import logging
from typing import Any

from fortigate_exporter.client import FortiHTTPError
from fortigate_exporter.metrics import Desc, Metric, ProbeError, ValueType
from fortigate_exporter.version import TargetMetadata, parse_version

log = logging.getLogger(__name__)

_STATS_PATH = "api/v2/monitor/firewall/policy/select"
_STATS6_PATH = "api/v2/monitor/firewall/policy6/select"
_CONFIG_PATH = "api/v2/cmdb/firewall/policy"
_CONFIG6_PATH = "api/v2/cmdb/firewall/policy6"
_CONFIG_QUERY = "vdom=*&policyid|name|uuid|action|status"

_LABELS = ("vdom", "protocol", "name", "uuid", "id")

_HIT_COUNT = Desc(
    "fortigate_policy_hit_count_total", "Number of times a policy has been hit", _LABELS
)
_BYTES = Desc(
    "fortigate_policy_bytes_total", "Number of bytes that has passed through a policy", _LABELS
)
_PACKETS = Desc(
    "fortigate_policy_packets_total", "Number of packets that has passed through a policy", _LABELS
)
_ACTIVE_SESSIONS = Desc(
    "fortigate_policy_active_sessions", "Number of active sessions for a policy", _LABELS
)


def _fetch(client: Any, path: str, query: str) -> list[dict[str, Any]]:
    try:
        data = client.get(path, query)
    except FortiHTTPError as exc:
        log.error("Error: %s", exc)
        raise ProbeError(str(exc)) from exc
    if data is None:
        return []
    if not isinstance(data, list):
        raise ProbeError(f'unexpected response shape (path: "{path}")')
    return data


def _names_by_uuid(configs: list[dict[str, Any]]) -> dict[str, str]:
    return {
        str(policy.get("uuid") or ""): str(policy.get("name") or "")
        for config in configs
        for policy in config.get("results") or []
    }


def _policy_metrics(
    responses: list[dict[str, Any]], names: dict[str, str], protocol: str
) -> list[Metric]:
    metrics = []
    for response in responses:
        vdom = str(response.get("vdom") or "")
        for stats in response.get("results") or []:
            policy_id = int(stats.get("policyid") or 0)
            uuid = str(stats.get("uuid") or "")
            name = "Implicit Deny"
            if policy_id > 0:
                if uuid in names:
                    name = names[uuid]
                else:
                    log.warning(
                        "Warning: Failed to map %r to policy config - this should not happen",
                        uuid,
                    )
                    name = "<UNKNOWN>"
            labels = (vdom, protocol, name, uuid, str(policy_id))
            metrics.extend(
                [
                    _HIT_COUNT.metric(ValueType.COUNTER, stats.get("hit_count") or 0, *labels),
                    _BYTES.metric(ValueType.COUNTER, stats.get("bytes") or 0, *labels),
                    _PACKETS.metric(ValueType.COUNTER, stats.get("packets") or 0, *labels),
                    _ACTIVE_SESSIONS.metric(
                        ValueType.GAUGE, stats.get("active_sessions") or 0, *labels
                    ),
                ]
            )
    return metrics


def probe_firewall_policies(client: Any, meta: TargetMetadata) -> list[Metric]:
    """Report hit counts, traffic and sessions of every IPv4 and IPv6 policy."""
    # ip_version=ipv4 has no effect unless combined policies are active.
    stats4 = _fetch(client, _STATS_PATH, "vdom=*&ip_version=ipv4")
    if not stats4:
        raise ProbeError(f'empty response (path: "{_STATS_PATH}")')

    version = str(stats4[0].get("version") or "")
    try:
        major, minor = parse_version(version)
    except ValueError as exc:
        log.error("Could not parse version number %r", version)
        raise ProbeError(str(exc)) from exc
    # From 6.4 on, IPv4 and IPv6 policies are combined.
    combined = major > 6 or (major == 6 and minor >= 4)

    if combined:
        stats6 = _fetch(client, _STATS_PATH, "vdom=*&ip_version=ipv6")
    else:
        stats6 = _fetch(client, _STATS6_PATH, "vdom=*")

    names4 = _names_by_uuid(_fetch(client, _CONFIG_PATH, _CONFIG_QUERY))
    if combined:
        names6 = names4
    else:
        names6 = _names_by_uuid(_fetch(client, _CONFIG6_PATH, _CONFIG_QUERY))

    return _policy_metrics(stats4, names4, "ipv4") + _policy_metrics(stats6, names6, "ipv6")