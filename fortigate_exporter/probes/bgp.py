"""BGP neighbor and BGP path probes."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any

from fortigate_exporter.client import FortiHTTPError
from fortigate_exporter.metrics import Desc, Metric, ProbeError, ValueType
from fortigate_exporter.version import TargetMetadata

log = logging.getLogger(__name__)

_BGP_STATES = {
    "Idle": 1,
    "Connect": 2,
    "Active": 3,
    "Open sent": 4,
    "Open confirm": 5,
    "Established": 6,
}

_NEIGHBOR_LABELS = ("vdom", "remote_as", "state", "admin_status", "local_ip", "neighbor_ip")
_NEIGHBOR_HELP = (
    "Configured bgp neighbor over {family}, return state as value (1 - Idle, 2 - Connect, "
    "3 - Active, 4 - Open sent, 5 - Open confirm, 6 - Established)"
)

_NEIGHBOR_IPV4 = Desc(
    "fortigate_bgp_neighbor_ipv4_info", _NEIGHBOR_HELP.format(family="ipv4"), _NEIGHBOR_LABELS
)
_NEIGHBOR_IPV6 = Desc(
    "fortigate_bgp_neighbor_ipv6_info", _NEIGHBOR_HELP.format(family="ipv6"), _NEIGHBOR_LABELS
)

_PATHS_IPV4 = Desc(
    "fortigate_bgp_neighbor_ipv4_paths",
    "Count of paths received from an BGP neighbor",
    ("vdom", "neighbor_ip"),
)
_BEST_PATHS_IPV4 = Desc(
    "fortigate_bgp_neighbor_ipv4_best_paths",
    "Count of best paths for an BGP neighbor",
    ("vdom", "neighbor_ip"),
)
_PATHS_IPV6 = Desc(
    "fortigate_bgp_neighbor_ipv6_paths",
    "Count of paths received from an BGP neighbor",
    ("vdom", "neighbor_ip"),
)
_BEST_PATHS_IPV6 = Desc(
    "fortigate_bgp_neighbor_ipv6_best_paths",
    "Count of best paths for an BGP neighbor",
    ("vdom", "neighbor_ip"),
)


def bgp_state_to_number(state: str) -> float:
    """Map a BGP session state name to its numeric value (0 when unknown)."""
    return float(_BGP_STATES.get(state, 0))


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


def _probe_paths(
    client: Any,
    meta: TargetMetadata,
    max_paths: int,
    path: str,
    paths_desc: Desc,
    best_desc: Desc,
) -> list[Metric]:
    if max_paths == 0:
        return []
    if meta.version_major < 7:
        # The endpoint does not exist before 7.0.0.
        return []

    responses = _fetch(client, path, f"vdom=*&count={max_paths}")
    paths: Counter[tuple[str, str]] = Counter()
    best: Counter[tuple[str, str]] = Counter()
    for response in responses:
        vdom = str(response.get("vdom") or "")
        results = response.get("results") or []
        if len(results) > max_paths:
            message = (
                f"Received more BGP Paths than maximum ({len(results)} > {max_paths}) "
                "allowed, ignoring metric ..."
            )
            log.error("Error: %s", message)
            raise ProbeError(message)
        for route in results:
            key = (vdom, str(route.get("learned_from") or ""))
            paths[key] += 1
            if route.get("is_best"):
                best[key] += 1

    metrics = [
        paths_desc.metric(ValueType.GAUGE, count, vdom, source)
        for (vdom, source), count in paths.items()
    ]
    metrics.extend(
        best_desc.metric(ValueType.GAUGE, count, vdom, source)
        for (vdom, source), count in best.items()
    )
    return metrics


def probe_bgp_neighbor_paths_ipv4(
    client: Any, meta: TargetMetadata, max_paths: int
) -> list[Metric]:
    """Count IPv4 BGP paths and best paths per neighbor."""
    return _probe_paths(
        client, meta, max_paths, "api/v2/monitor/router/bgp/paths", _PATHS_IPV4, _BEST_PATHS_IPV4
    )


def probe_bgp_neighbor_paths_ipv6(
    client: Any, meta: TargetMetadata, max_paths: int
) -> list[Metric]:
    """Count IPv6 BGP paths and best paths per neighbor."""
    return _probe_paths(
        client, meta, max_paths, "api/v2/monitor/router/bgp/paths6", _PATHS_IPV6, _BEST_PATHS_IPV6
    )


def _probe_neighbors(client: Any, meta: TargetMetadata, path: str, desc: Desc) -> list[Metric]:
    if meta.version_major < 7:
        # The endpoint does not exist before 7.0.0.
        return []

    metrics = []
    for response in _fetch(client, path, "vdom=*"):
        vdom = str(response.get("vdom") or "")
        for peer in response.get("results") or []:
            state = str(peer.get("state") or "")
            metrics.append(
                desc.metric(
                    ValueType.GAUGE,
                    bgp_state_to_number(state),
                    vdom,
                    str(int(peer.get("remote_as") or 0)),
                    state,
                    "true" if peer.get("admin_status") else "false",
                    str(peer.get("local_ip") or ""),
                    str(peer.get("neighbor_ip") or ""),
                )
            )
    return metrics


def probe_bgp_neighbors_ipv4(client: Any, meta: TargetMetadata) -> list[Metric]:
    """Report configured IPv4 BGP neighbors with their state."""
    return _probe_neighbors(client, meta, "api/v2/monitor/router/bgp/neighbors", _NEIGHBOR_IPV4)


def probe_bgp_neighbors_ipv6(client: Any, meta: TargetMetadata) -> list[Metric]:
    """Report configured IPv6 BGP neighbors with their state."""
    return _probe_neighbors(client, meta, "api/v2/monitor/router/bgp/neighbors6", _NEIGHBOR_IPV6)