# fortigate_exporter

A library that collects metrics from Fortigate firewalls through the FortiOS
REST API and renders them in the Prometheus text exposition format.

## Probes

Each probe queries one API endpoint (across all VDOMs) and returns a list of
`Metric` objects:

| Module | Probes | Metrics |
|---|---|---|
| `fortigate_exporter.probes.bgp` | `probe_bgp_neighbors_ipv4`, `probe_bgp_neighbors_ipv6`, `probe_bgp_neighbor_paths_ipv4`, `probe_bgp_neighbor_paths_ipv6` | `fortigate_bgp_neighbor_ipv4_info`, `fortigate_bgp_neighbor_ipv4_paths`, `fortigate_bgp_neighbor_ipv4_best_paths` and their IPv6 counterparts (FortiOS 7.0 and later) |
| `fortigate_exporter.probes.ippool` | `probe_firewall_ippool` | `fortigate_ippool_*` |
| `fortigate_exporter.probes.license` | `probe_license_status` | `fortigate_license_vdom_usage`, `fortigate_license_vdom_max` |
| `fortigate_exporter.probes.logs` | `probe_log_current_disk_usage`, `probe_log_analyzer`, `probe_log_analyzer_queue` | `fortigate_log_disk_*`, `fortigate_log_fortianalyzer_*` |
| `fortigate_exporter.probes.load_balance` | `probe_firewall_load_balance` | `fortigate_lb_*` (FortiOS 6.4 and later) |
| `fortigate_exporter.probes.policy` | `probe_firewall_policies` | `fortigate_policy_*` |
| `fortigate_exporter.probes.managed_switch` | `probe_managed_switch` | `fortigate_managed_switch_*` |

Every probe takes an API client and a `TargetMetadata` (from
`fortigate_exporter.version`, holding `version_major` and `version_minor`).
The BGP path probes also take `max_paths`; with `max_paths` of 0 they return
no metrics. A probe whose endpoint does not exist on the target's FortiOS
version returns an empty list. When the API call fails or the answer cannot
be used, a probe raises `fortigate_exporter.metrics.ProbeError`.

`fortigate_exporter.probes.load_balance.parse_rtt` converts the API's RTT
strings to seconds (`"<1"` becomes 0.001; empty or unparsable values become
NaN). `fortigate_exporter.version.parse_version("v6.4.4")` returns `(6, 4)`
and raises `ValueError` for strings not of the form `v<major>.<minor>.`.

## Metrics and rendering

`fortigate_exporter.metrics` provides `Desc` (name, help, label names),
`Metric`, `ValueType` (`GAUGE`, `COUNTER`), `render(metrics)` which produces
the text exposition format with families sorted by name, and `format_value`.
`get_build_info(version, git_hash)` and `build_info_metric(info)` produce the
`fortigate_exporter_build_info` gauge with labels `version`, `revision` and
`pythonversion`.

## Configuration

`fortigate_exporter.config.load_config(argv)` parses command-line style
options (see `build_parser()`):

- `--auth-file` – YAML file mapping targets to API tokens (default `fortigate-key.yaml`)
- `--listen` – listen address (default `:9710`); stored in the config only
- `--scrape-timeout` – seconds a request may take (default 30)
- `--https-timeout` – TLS connect timeout in seconds (default 10)
- `--insecure` – accept certificates that do not verify
- `--extra-ca-certs` – comma-separated PEM files to trust in addition to the system store
- `--max-bgp-paths` – BGP paths to fetch when counting routes (default 10000)
- `--max-vpn-users` – stored in the config (default 0)

The authentication file is keyed by target URL:

```yaml
"https://192.0.2.1":
  token: token
  probes:
    include: []
    exclude: []
```

`parse_auth_keys(text)` parses such a document. `init(argv)` loads the
configuration once, `reinit(argv)` loads it again, and `get_config()` returns
the loaded `FortiExporterConfig`. Problems reading or parsing files raise
`ConfigError`.

## Using it

```python
from fortigate_exporter.client import configure, new_forti_client
from fortigate_exporter.config import get_config, init
from fortigate_exporter.metrics import render
from fortigate_exporter.probes.license import probe_license_status
from fortigate_exporter.version import TargetMetadata

init(["--auth-file", "fortigate-key.yaml"])
config = get_config()
session = configure(config)

client = new_forti_client("https://192.0.2.1", session, config)
print(render(probe_license_status(client, TargetMetadata(7, 0))))
```

`configure(config)` returns a `requests.Session` trusting the system CAs plus
any extra CA files (or not verifying at all with `--insecure`).
`new_forti_client` accepts only HTTPS targets with a token registered for
them and raises `FortiHTTPError` otherwise; `FortiTokenClient.get` raises it
when the device answers with a status other than 200 or with invalid JSON.

## What it does not do

The package is a library only. It has no command to start, runs no HTTP
server and serves no `/metrics` or `/probe` endpoint; the `--listen` option
is parsed but nothing listens on it. It does not determine a target's
FortiOS version by itself: the caller supplies `TargetMetadata`. There is no
probe for VPN users, so `--max-vpn-users` has no effect, and the per-target
`include`/`exclude` probe lists are read but not acted on.