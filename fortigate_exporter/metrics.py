"""Constant metrics, build information and the Prometheus text format."""

from __future__ import annotations

import enum
import math
import platform
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable


class ProbeError(Exception):
    """Raised by a probe when it cannot produce its metrics."""


class ValueType(enum.Enum):
    """The Prometheus type of a metric."""

    GAUGE = "gauge"
    COUNTER = "counter"


@dataclass(frozen=True)
class Desc:
    """Name, help text and label names of a metric family."""

    name: str
    help: str
    label_names: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "label_names", tuple(self.label_names))

    def metric(self, value_type: ValueType, value: float, *args: str) -> "Metric":
        """Return a constant metric with the given label values."""
        if len(args) != len(self.label_names):
            raise ValueError(
                f"inconsistent label cardinality for {self.name}: expected "
                f"{len(self.label_names)} label values but got {len(args)}"
            )
        return Metric(self, ValueType(value_type), float(value), tuple(str(a) for a in args))


@dataclass(frozen=True)
class Metric:
    """One sample of a metric family."""

    desc: Desc
    value_type: ValueType
    value: float
    label_values: tuple[str, ...] = ()

    @property
    def labels(self) -> dict[str, str]:
        return dict(zip(self.desc.label_names, self.label_values))


@dataclass(frozen=True)
class BuildInfo:
    """Version details of the running exporter."""

    version: str
    git_hash: str
    python_version: str


def format_value(value: float) -> str:
    """Format a sample value the way the Prometheus text format does."""
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    sign, digits, exponent = Decimal(repr(value)).normalize().as_tuple()
    text = "".join(str(d) for d in digits)
    point = len(text) + exponent
    exp10 = point - 1
    prefix = "-" if sign else ""
    if exp10 < -4 or exp10 >= 6:
        mantissa = text[0] + ("." + text[1:] if len(text) > 1 else "")
        return f"{prefix}{mantissa}e{exp10:+03d}"
    if point <= 0:
        return f"{prefix}0.{'0' * -point}{text}"
    if point >= len(text):
        return prefix + text + "0" * (point - len(text))
    return f"{prefix}{text[:point]}.{text[point:]}"


def _escape_help(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n")


def _escape_label(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def _sorted_pairs(metric: Metric) -> list[tuple[str, str]]:
    return sorted(metric.labels.items())


def _sample_line(metric: Metric) -> str:
    pairs = _sorted_pairs(metric)
    labels = ""
    if pairs:
        labels = "{" + ",".join(f'{k}="{_escape_label(v)}"' for k, v in pairs) + "}"
    return f"{metric.desc.name}{labels} {format_value(metric.value)}"


def render(metrics: Iterable[Metric]) -> str:
    """Render metrics in the Prometheus text exposition format.

    Families are ordered by name and samples by their label values.
    """
    families: dict[str, tuple[Desc, ValueType, list[Metric]]] = {}
    for metric in metrics:
        families.setdefault(metric.desc.name, (metric.desc, metric.value_type, []))[2].append(metric)

    lines = []
    for name in sorted(families):
        desc, value_type, members = families[name]
        lines.append(f"# HELP {name} {_escape_help(desc.help)}")
        lines.append(f"# TYPE {name} {value_type.value}")
        members.sort(key=lambda m: [v for _, v in _sorted_pairs(m)])
        lines.extend(_sample_line(m) for m in members)
    return "".join(line + "\n" for line in lines)


def get_build_info(version: str = "(devel)", git_hash: str = "(no hash)") -> BuildInfo:
    """Return build information with any leading ``v`` removed from the version."""
    return BuildInfo(
        version=version.removeprefix("v"),
        git_hash=git_hash,
        python_version=platform.python_version(),
    )


_BUILD_INFO = Desc(
    "fortigate_exporter_build_info",
    "This info metric contains build information for about the exporter",
    ("version", "revision", "pythonversion"),
)


def build_info_metric(info: BuildInfo) -> Metric:
    """Return the build-info gauge for the given build information."""
    return _BUILD_INFO.metric(ValueType.GAUGE, 1, info.version, info.git_hash, info.python_version)