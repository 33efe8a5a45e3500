import textwrap

import pytest

from fortigate_exporter.client import FortiHTTPError
from fortigate_exporter.metrics import ProbeError, render
from fortigate_exporter.probes.logs import (
    probe_log_analyzer,
    probe_log_analyzer_queue,
    probe_log_current_disk_usage,
)
from fortigate_exporter.version import TargetMetadata

META = TargetMetadata(6, 4)


class FakeClient:
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def get(self, path, query=""):
        self.calls.append((path, query))
        if path not in self.responses:
            raise FortiHTTPError(f'Response code was 404, expected 200 (path: "{path}")')
        return self.responses[path]


def test_log_current_disk_usage():
    client = FakeClient(
        {
            "api/v2/monitor/log/current-disk-usage": [
                {"vdom": "root", "results": {"used_bytes": 700000000, "total_bytes": 30000000000}}
            ]
        }
    )
    metrics = probe_log_current_disk_usage(client, META)
    expected = textwrap.dedent(
        """\
        # HELP fortigate_log_disk_total_bytes Disk total bytes for log
        # TYPE fortigate_log_disk_total_bytes gauge
        fortigate_log_disk_total_bytes{vdom="root"} 3e+10
        # HELP fortigate_log_disk_used_bytes Disk used bytes for log
        # TYPE fortigate_log_disk_used_bytes gauge
        fortigate_log_disk_used_bytes{vdom="root"} 7e+08
        """
    )
    assert render(metrics) == expected
    assert client.calls == [("api/v2/monitor/log/current-disk-usage", "vdom=*")]


def test_log_analyzer():
    client = FakeClient(
        {
            "api/v2/monitor/log/fortianalyzer": [
                {
                    "vdom": "root",
                    "results": {
                        "registration": "registered",
                        "connection": "allow",
                        "received": 999,
                    },
                }
            ]
        }
    )
    metrics = probe_log_analyzer(client, META)
    expected = textwrap.dedent(
        """\
        # HELP fortigate_log_fortianalyzer_logs_received Received logs in fortianalyzer
        # TYPE fortigate_log_fortianalyzer_logs_received gauge
        fortigate_log_fortianalyzer_logs_received{vdom="root"} 999
        # HELP fortigate_log_fortianalyzer_registration_info Fortianalyzer state info
        # TYPE fortigate_log_fortianalyzer_registration_info gauge
        fortigate_log_fortianalyzer_registration_info{connection="allow",registration="registered",vdom="root"} 1
        """
    )
    assert render(metrics) == expected


def test_log_analyzer_queue():
    client = FakeClient(
        {
            "api/v2/monitor/log/fortianalyzer-queue": [
                {
                    "vdom": "root",
                    "results": {"connected": 1, "failed_logs": 0, "cached_logs": 0},
                }
            ]
        }
    )
    metrics = probe_log_analyzer_queue(client, META)
    expected = textwrap.dedent(
        """\
        # HELP fortigate_log_fortianalyzer_queue_connections Fortianalyzer queue connected state
        # TYPE fortigate_log_fortianalyzer_queue_connections gauge
        fortigate_log_fortianalyzer_queue_connections{vdom="root"} 1
        # HELP fortigate_log_fortianalyzer_queue_logs State of logs in the queue
        # TYPE fortigate_log_fortianalyzer_queue_logs gauge
        fortigate_log_fortianalyzer_queue_logs{state="cached",vdom="root"} 0
        fortigate_log_fortianalyzer_queue_logs{state="failed",vdom="root"} 0
        """
    )
    assert render(metrics) == expected


@pytest.mark.parametrize(
    "probe", [probe_log_current_disk_usage, probe_log_analyzer, probe_log_analyzer_queue]
)
def test_client_error_fails(probe):
    with pytest.raises(ProbeError):
        probe(FakeClient({}), META)


def test_disk_usage_multiple_vdoms():
    client = FakeClient(
        {
            "api/v2/monitor/log/current-disk-usage": [
                {"vdom": "root", "results": {"used_bytes": 1, "total_bytes": 2}},
                {"vdom": "other", "results": {"used_bytes": 3, "total_bytes": 4}},
            ]
        }
    )
    metrics = probe_log_current_disk_usage(client, META)
    assert [(m.desc.name, m.labels["vdom"], m.value) for m in metrics] == [
        ("fortigate_log_disk_used_bytes", "root", 1.0),
        ("fortigate_log_disk_total_bytes", "root", 2.0),
        ("fortigate_log_disk_used_bytes", "other", 3.0),
        ("fortigate_log_disk_total_bytes", "other", 4.0),
    ]