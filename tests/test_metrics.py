import math

import pytest

from fortigate_exporter.metrics import (
    Desc,
    ValueType,
    build_info_metric,
    format_value,
    get_build_info,
    render,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (534459022.0, "5.34459022e+08"),
        (999.0, "999"),
        (0.001, "0.001"),
        (0.357, "0.357"),
        (38260.0, "38260"),
        (792806.0, "792806"),
        (3e10, "3e+10"),
        (7e8, "7e+08"),
        (1526167038930.0, "1.52616703893e+12"),
        (6.099999904632568, "6.099999904632568"),
        (0.0, "0"),
        (math.nan, "NaN"),
    ],
)
def test_format_value(value, expected):
    assert format_value(value) == expected


def test_format_value_infinities():
    assert format_value(math.inf) == "+Inf"
    assert format_value(-math.inf) == "-Inf"


def test_format_value_round_trips():
    for value in (1.5, 123456789.0, 0.0001234, -42.0):
        assert float(format_value(value)) == value


def test_metric_label_cardinality():
    desc = Desc("fortigate_log_disk_used_bytes", "Disk used bytes for log", ["vdom"])
    with pytest.raises(ValueError):
        desc.metric(ValueType.GAUGE, 1)


def test_metric_labels():
    desc = Desc("fortigate_log_disk_used_bytes", "Disk used bytes for log", ["vdom"])
    metric = desc.metric(ValueType.GAUGE, 7e8, "root")
    assert metric.labels == {"vdom": "root"}
    assert metric.value == 7e8


def test_render_single_family():
    desc = Desc("fortigate_log_disk_total_bytes", "Disk total bytes for log", ["vdom"])
    text = render([desc.metric(ValueType.GAUGE, 3e10, "root")])
    assert text == (
        "# HELP fortigate_log_disk_total_bytes Disk total bytes for log\n"
        "# TYPE fortigate_log_disk_total_bytes gauge\n"
        'fortigate_log_disk_total_bytes{vdom="root"} 3e+10\n'
    )


def test_render_without_labels():
    used = Desc("fortigate_license_vdom_usage", "The amount of VDOM licenses currently used")
    total = Desc("fortigate_license_vdom_max", "The total amount of VDOM licenses available")
    text = render([used.metric(ValueType.GAUGE, 114), total.metric(ValueType.GAUGE, 125)])
    assert text.splitlines() == [
        "# HELP fortigate_license_vdom_max The total amount of VDOM licenses available",
        "# TYPE fortigate_license_vdom_max gauge",
        "fortigate_license_vdom_max 125",
        "# HELP fortigate_license_vdom_usage The amount of VDOM licenses currently used",
        "# TYPE fortigate_license_vdom_usage gauge",
        "fortigate_license_vdom_usage 114",
    ]


def test_render_sorts_samples_and_labels():
    desc = Desc(
        "fortigate_lb_real_server_mode",
        "Mode of this real server: active, standby or disabled",
        ["vdom", "virtual_server", "id", "mode"],
    )
    metrics = [
        desc.metric(ValueType.GAUGE, 0, "root", "LB-EXAMPLE", "1", "standby"),
        desc.metric(ValueType.GAUGE, 1, "root", "LB-EXAMPLE", "1", "active"),
        desc.metric(ValueType.GAUGE, 0, "root", "LB-EXAMPLE", "1", "disabled"),
    ]
    samples = [line for line in render(metrics).splitlines() if not line.startswith("#")]
    assert samples == [
        'fortigate_lb_real_server_mode{id="1",mode="active",vdom="root",virtual_server="LB-EXAMPLE"} 1',
        'fortigate_lb_real_server_mode{id="1",mode="disabled",vdom="root",virtual_server="LB-EXAMPLE"} 0',
        'fortigate_lb_real_server_mode{id="1",mode="standby",vdom="root",virtual_server="LB-EXAMPLE"} 0',
    ]


def test_render_counter_type_and_escaping():
    desc = Desc("fortigate_policy_hit_count_total", "Number of times a policy has been hit", ["name"])
    text = render([desc.metric(ValueType.COUNTER, 4662, 'a"b\\c')])
    assert "# TYPE fortigate_policy_hit_count_total counter\n" in text
    assert 'fortigate_policy_hit_count_total{name="a\\"b\\\\c"} 4662\n' in text


def test_get_build_info_strips_v():
    info = get_build_info("v1.2.3", "abc123")
    assert info.version == "1.2.3"
    assert info.git_hash == "abc123"


def test_get_build_info_defaults():
    info = get_build_info()
    assert info.version == "(devel)"
    assert info.git_hash == "(no hash)"


def test_build_info_metric():
    info = get_build_info("v1.2.3", "abc123")
    metric = build_info_metric(info)
    assert metric.desc.name == "fortigate_exporter_build_info"
    assert metric.value == 1.0
    assert metric.labels["version"] == "1.2.3"
    assert metric.labels["revision"] == "abc123"
    assert metric.labels["pythonversion"] == info.python_version