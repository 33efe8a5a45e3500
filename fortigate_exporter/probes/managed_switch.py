"""Managed FortiSwitch probe: switch, port and port statistics metrics."""

from __future__ import annotations

import logging
from typing import Any

from fortigate_exporter.client import FortiHTTPError
from fortigate_exporter.metrics import Desc, Metric, ProbeError, ValueType
from fortigate_exporter.version import TargetMetadata

log = logging.getLogger(__name__)

# Pagination is not implemented; at most 1000 entries are requested.
_PATH = "api/v2/monitor/switch-controller/managed-switch"
_QUERY = "vdom=*&start=0&poe=true&port_stats=true&transceiver=true&count=1000"

_PORT_LABELS = ("vdom", "switch_name", "port")

_SWITCH_INFO = Desc(
    "fortigate_managed_switch_info",
    "Infos about a managed switch",
    ("vdom", "switch_name", "os_version", "serial", "state", "status"),
)
_MAX_POE_BUDGET = Desc(
    "fortigate_managed_switch_max_poe_budget_watt",
    "Max poe budget watt",
    ("vdom", "switch_name"),
)
_PORT_INFO = Desc(
    "fortigate_managed_switch_port_info",
    "Infos about a switch port",
    ("vdom", "switch_name", "port", "vlan", "duplex", "status", "poe_status", "poe_capable"),
)
_PORT_STATUS = Desc(
    "fortigate_managed_switch_port_status", "Port status up=1 down=0", _PORT_LABELS
)
_PORT_POWER = Desc(
    "fortigate_managed_switch_port_power_watt", "Port power in watt", _PORT_LABELS
)
_PORT_POWER_STATUS = Desc(
    "fortigate_managed_switch_port_power_status", "Port power status", _PORT_LABELS
)


def _stat(name: str, help_text: str) -> Desc:
    return Desc(f"fortigate_managed_switch_{name}", help_text, _PORT_LABELS)


# (descriptor, key in the port_stats entry), in emission order.
_PORT_STATS = (
    (_stat("rx_bytes_total", "Total number of received bytes"), "rx-bytes"),
    (_stat("tx_bytes_total", "Total number of transmitted bytes"), "tx-bytes"),
    (_stat("rx_packets_total", "Total number of received packets"), "rx-packets"),
    (_stat("tx_packets_total", "Total number of transmitted packets"), "tx-packets"),
    (_stat("rx_ucast_packets_total", "Total number of received unicast packets"), "rx-ucast"),
    (_stat("tx_ucast_packets_total", "Total number of transmitted unicast packets"), "tx-ucast"),
    (_stat("rx_mcast_packets_total", "Total number of received multicast packets"), "rx-mcast"),
    (_stat("tx_mcast_packets_total", "Total number of transmitted multicast packets"), "tx-mcast"),
    (_stat("rx_bcast_packets_total", "Total number of received broadcast packets"), "rx-bcast"),
    (_stat("tx_bcast_packets_total", "Total number of transmitted broadcast packets"), "tx-bcast"),
    (_stat("rx_errors_total", "Total number of received errors"), "rx-errors"),
    (_stat("tx_errors_total", "Total number of transmitted errors"), "tx-errors"),
    (_stat("rx_drops_total", "Total number of received drops"), "rx-drops"),
    (_stat("tx_drops_total", "Total number of transmitted drops"), "tx-drops"),
    (_stat("rx_oversize_total", "Total number of received oversize"), "rx-oversize"),
    (_stat("tx_oversize_total", "Total number of transmitted oversize"), "tx-oversize"),
    (_stat("under_size_total", "Total number of under size"), "undersize"),
    (_stat("fragments_total", "Total number of fragments"), "fragments"),
    (_stat("jabbers_total", "Total number of jabbers"), "jabbers"),
    (_stat("collisions_total", "Total number of collisions"), "collisions"),
    (_stat("crc_alignments_total", "Total number of crc alignments"), "crc-alignments"),
    (_stat("l3_packets_total", "Total number of l3 packets"), "l3packets"),
)


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


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _port_metrics(vdom: str, switch: str, port: dict[str, Any]) -> list[Metric]:
    name = _text(port.get("interface"))
    status = _text(port.get("status"))
    gauge = ValueType.GAUGE
    return [
        _PORT_STATUS.metric(gauge, 1 if status == "up" else 0, vdom, switch, name),
        _PORT_INFO.metric(
            gauge,
            1,
            vdom,
            switch,
            name,
            _text(port.get("vlan")),
            _text(port.get("duplex")),
            status,
            _text(port.get("poe_status")),
            "true" if port.get("poe_capable") else "false",
        ),
        _PORT_POWER.metric(gauge, port.get("port_power") or 0, vdom, switch, name),
        _PORT_POWER_STATUS.metric(gauge, port.get("power_status") or 0, vdom, switch, name),
    ]


def _switch_metrics(result: dict[str, Any]) -> list[Metric]:
    vdom = _text(result.get("vdom"))
    switch = _text(result.get("name"))
    metrics = [
        _SWITCH_INFO.metric(
            ValueType.COUNTER,
            1,
            vdom,
            switch,
            _text(result.get("os_version")),
            _text(result.get("serial")),
            _text(result.get("state")),
            _text(result.get("status")),
        ),
        _MAX_POE_BUDGET.metric(ValueType.COUNTER, result.get("max_poe_budget") or 0, vdom, switch),
    ]
    for port in result.get("ports") or []:
        metrics.extend(_port_metrics(vdom, switch, port))
    for port_name, stats in (result.get("port_stats") or {}).items():
        metrics.extend(
            desc.metric(ValueType.COUNTER, stats.get(key) or 0, vdom, switch, str(port_name))
            for desc, key in _PORT_STATS
        )
    return metrics


def probe_managed_switch(client: Any, meta: TargetMetadata) -> list[Metric]:
    """Report managed switches, their ports and per-port traffic counters."""
    metrics = []
    for response in _fetch(client):
        for result in response.get("results") or []:
            metrics.extend(_switch_metrics(result))
    return metrics