"""Metric descriptors, constant gauge samples and the text exposition format."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence


@dataclass(frozen=True)
class Desc:
    """Describes a metric family: its full name, help text and label names."""

    fq_name: str
    help: str
    variable_labels: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "variable_labels", tuple(self.variable_labels))


@dataclass(frozen=True)
class Metric:
    """A single gauge sample belonging to a described family."""

    desc: Desc
    value: float
    label_values: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.desc.fq_name

    @property
    def labels(self) -> dict[str, str]:
        return dict(zip(self.desc.variable_labels, self.label_values))


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join the non-empty parts with underscores; an empty name yields ''."""
    if not name:
        return ""
    return "_".join(part for part in (namespace, subsystem, name) if part)


def gauge(desc: Desc, value: float, *args: str) -> Metric:
    """Build a constant gauge sample, checking the label values against ``desc``."""
    if len(args) != len(desc.variable_labels):
        raise ValueError(
            f"{desc.fq_name}: expected {len(desc.variable_labels)} label values, "
            f"got {len(args)}"
        )
    for arg in args:
        if not isinstance(arg, str):
            raise TypeError(f"{desc.fq_name}: label values must be strings, got {arg!r}")
    return Metric(desc, float(value), tuple(args))


def status_to_value(status: str, statuses: Sequence[str]) -> float:
    """Return the position of ``status`` in ``statuses``, or -1 if it is unknown."""
    try:
        return float(list(statuses).index(status))
    except ValueError:
        return -1.0


def _format_value(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def _escape_label(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def _escape_help(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n")


def _sorted_pairs(metric: Metric) -> list[tuple[str, str]]:
    return sorted(metric.labels.items())


def _sample_line(metric: Metric) -> str:
    pairs = _sorted_pairs(metric)
    value = _format_value(metric.value)
    if not pairs:
        return f"{metric.name} {value}"
    rendered = ",".join(f'{key}="{_escape_label(val)}"' for key, val in pairs)
    return f"{metric.name}{{{rendered}}} {value}"


def render_text(metrics: Iterable[Metric]) -> str:
    """Render gauge samples in the text exposition format.

    Families are sorted by name, and samples within a family by their label
    values taken in label-name order.
    """
    families: dict[str, list[Metric]] = {}
    for metric in metrics:
        families.setdefault(metric.name, []).append(metric)

    lines: list[str] = []
    for name in sorted(families):
        members = families[name]
        lines.append(f"# HELP {name} {_escape_help(members[0].desc.help)}")
        lines.append(f"# TYPE {name} gauge")
        ordered = sorted(members, key=lambda m: [val for _, val in _sorted_pairs(m)])
        lines.extend(_sample_line(m) for m in ordered)
    return "".join(line + "\n" for line in lines)