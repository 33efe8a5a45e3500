"""Command-line options and the target authentication map."""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

log = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the exporter configuration cannot be loaded."""


@dataclass
class Probes:
    """Probe names to include or exclude for a target."""

    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)


@dataclass
class TargetAuth:
    """Authentication data registered for one target."""

    token: str = ""
    probes: Probes = field(default_factory=Probes)


@dataclass
class LocalCert:
    """An extra CA bundle read from disk."""

    path: str
    content: bytes


@dataclass
class FortiExporterConfig:
    """The resolved exporter configuration."""

    auth_keys: dict[str, TargetAuth] = field(default_factory=dict)
    listen: str = ":9710"
    scrape_timeout: int = 30
    tls_timeout: int = 10
    tls_insecure: bool = False
    tls_extra_cas: list[LocalCert] = field(default_factory=list)
    max_bgp_paths: int = 10000
    max_vpn_users: int = 0


_saved: FortiExporterConfig | None = None


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the exporter's options."""
    parser = argparse.ArgumentParser(prog="fortigate-exporter")
    parser.add_argument(
        "--auth-file", "-auth-file", dest="auth_file", default="fortigate-key.yaml",
        help="file containing the authentication map to use when connecting to a Fortigate device",
    )
    parser.add_argument(
        "--listen", "-listen", dest="listen", default=":9710",
        help="address to listen on",
    )
    parser.add_argument(
        "--scrape-timeout", "-scrape-timeout", dest="scrape_timeout", type=int, default=30,
        help="max seconds to allow a scrape to take",
    )
    parser.add_argument(
        "--https-timeout", "-https-timeout", dest="tls_timeout", type=int, default=10,
        help="TLS Handshake timeout in seconds",
    )
    parser.add_argument(
        "--insecure", "-insecure", dest="tls_insecure", action="store_true",
        help="Allow insecure certificates",
    )
    parser.add_argument(
        "--extra-ca-certs", "-extra-ca-certs", dest="extra_ca_certs", default="",
        help="comma-separated files containing extra PEMs to trust for TLS connections "
        "in addition to the system trust store",
    )
    parser.add_argument(
        "--max-bgp-paths", "-max-bgp-paths", dest="max_bgp_paths", type=int, default=10000,
        help="How many BGP Paths to receive when counting routes, needs to be greater than "
        "or equal to the number of routes or metrics will not be generated",
    )
    parser.add_argument(
        "--max-vpn-users", "-max-vpn-users", dest="max_vpn_users", type=int, default=0,
        help="How many VPN Users to receive when counting users, needs to be greater than "
        "or equal the number of users or metrics will not be generated (0 eq. none by default)",
    )
    return parser


def _probe_list(value: Any, target: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"probe list for {target!r} must be a sequence")
    return [str(item) for item in value]


def _target_auth(target: str, entry: Any) -> TargetAuth:
    if entry is None:
        return TargetAuth()
    if not isinstance(entry, dict):
        raise ConfigError(f"authentication entry for {target!r} must be a mapping")
    probes = entry.get("probes") or {}
    if not isinstance(probes, dict):
        raise ConfigError(f"probes for {target!r} must be a mapping")
    token = entry.get("token")
    return TargetAuth(
        token="" if token is None else str(token),
        probes=Probes(
            include=_probe_list(probes.get("include"), target),
            exclude=_probe_list(probes.get("exclude"), target),
        ),
    )


def parse_auth_keys(text: str) -> dict[str, TargetAuth]:
    """Parse the YAML authentication map into target -> TargetAuth."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse API authentication map file: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Failed to parse API authentication map file: expected a mapping")
    return {str(target): _target_auth(str(target), entry) for target, entry in data.items()}


def load_config(argv: list[str] | None = None) -> FortiExporterConfig:
    """Parse options, read the auth map and extra CA files, and build a config."""
    args = build_parser().parse_args(argv)

    try:
        text = Path(args.auth_file).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read API authentication map file: {exc}") from exc
    auth_keys = parse_auth_keys(text)
    log.info("Loaded %d API keys", len(auth_keys))

    extra_cas = []
    for path in args.extra_ca_certs.split(","):
        if not path:
            continue
        try:
            content = Path(path).read_bytes()
        except OSError as exc:
            raise ConfigError(f'Failed to read extra CA file "{path}": {exc}') from exc
        extra_cas.append(LocalCert(path=path, content=content))

    return FortiExporterConfig(
        auth_keys=auth_keys,
        listen=args.listen,
        scrape_timeout=args.scrape_timeout,
        tls_timeout=args.tls_timeout,
        tls_insecure=args.tls_insecure,
        tls_extra_cas=extra_cas,
        max_bgp_paths=args.max_bgp_paths,
        max_vpn_users=args.max_vpn_users,
    )


def init(argv: list[str] | None = None) -> FortiExporterConfig:
    """Load the configuration unless it was already loaded; return it."""
    if _saved is None:
        return reinit(argv)
    return _saved


def reinit(argv: list[str] | None = None) -> FortiExporterConfig:
    """Load the configuration again, replacing any saved one."""
    global _saved
    _saved = load_config(argv)
    return _saved


def get_config() -> FortiExporterConfig:
    """Return the saved configuration."""
    if _saved is None:
        raise ConfigError("configuration has not been loaded")
    return _saved