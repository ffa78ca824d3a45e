"""Container infrastructure collectors: cluster status, masters and nodes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, Sequence

from .metrics import Desc, Metric, build_fq_name, gauge

NAMESPACE = "openstack"
SUBSYSTEM = "container_infra"

_log = logging.getLogger(__name__)

KNOWN_CLUSTER_STATUSES: tuple[str, ...] = (
    "CREATE_COMPLETE",
    "CREATE_FAILED",
    "CREATE_IN_PROGRESS",
    "UPDATE_IN_PROGRESS",
    "UPDATE_FAILED",
    "UPDATE_COMPLETE",
    "DELETE_IN_PROGRESS",
    "DELETE_FAILED",
    "DELETE_COMPLETE",
    "RESUME_COMPLETE",
    "RESUME_FAILED",
    "RESTORE_COMPLETE",
    "ROLLBACK_IN_PROGRESS",
    "ROLLBACK_FAILED",
    "ROLLBACK_COMPLETE",
    "SNAPSHOT_COMPLETE",
    "CHECK_COMPLETE",
    "ADOPT_COMPLETE",
)


def _desc(name: str, labels: Sequence[str] = ()) -> Desc:
    return Desc(build_fq_name(NAMESPACE, SUBSYSTEM, name), name, tuple(labels))


UP_DESC = _desc("up")
CLUSTER_STATUS_DESC = _desc(
    "cluster_status",
    ("uuid", "name", "stack_id", "status", "node_count", "master_count", "project_id"),
)
TOTAL_CLUSTERS_DESC = _desc("total_clusters")
CLUSTER_MASTERS_DESC = _desc(
    "cluster_masters",
    ("uuid", "name", "stack_id", "status", "node_count", "project_id"),
)
CLUSTER_NODES_DESC = _desc(
    "cluster_nodes",
    ("uuid", "name", "stack_id", "status", "master_count", "project_id"),
)


@dataclass(frozen=True)
class Cluster:
    uuid: str | None
    name: str | None
    stack_id: str
    status: str
    project_id: str | None
    master_count: int
    node_count: int


class MagnumQueries(Protocol):
    """The query the container infrastructure collectors run."""

    def get_cluster_metrics(self) -> Sequence[Cluster]: ...


def map_cluster_status_value(status: str) -> int:
    """Return the index of ``status`` among the known statuses, or -1."""
    try:
        return KNOWN_CLUSTER_STATUSES.index(status)
    except ValueError:
        return -1


def format_count(count: int) -> str:
    """Render a count as a decimal integer label value."""
    return str(int(count))


def _status_metric(c: Cluster) -> Metric:
    return gauge(
        CLUSTER_STATUS_DESC,
        map_cluster_status_value(c.status),
        c.uuid or "",
        c.name or "",
        c.stack_id,
        c.status,
        format_count(c.node_count),
        format_count(c.master_count),
        c.project_id or "",
    )


def _masters_metric(c: Cluster) -> Metric:
    return gauge(
        CLUSTER_MASTERS_DESC,
        int(c.master_count),
        c.uuid or "",
        c.name or "",
        c.stack_id,
        c.status,
        format_count(c.node_count),
        c.project_id or "",
    )


def _nodes_metric(c: Cluster) -> Metric:
    return gauge(
        CLUSTER_NODES_DESC,
        int(c.node_count),
        c.uuid or "",
        c.name or "",
        c.stack_id,
        c.status,
        format_count(c.master_count),
        c.project_id or "",
    )


class _Collector:
    _name = ""
    _failure = "Failed to get cluster metrics"

    def __init__(self, queries: MagnumQueries, logger: logging.Logger | None = None) -> None:
        self.queries = queries
        self._logger = logging.LoggerAdapter(
            logger or _log,
            {"namespace": NAMESPACE, "subsystem": SUBSYSTEM, "collector": self._name},
        )

    def _fetch(self) -> list[Cluster] | None:
        try:
            return list(self.queries.get_cluster_metrics())
        except Exception as err:
            self._logger.error("%s: %s", self._failure, err)
            return None


class ClustersCollector(_Collector):
    """Emits the cluster count and one status sample per cluster."""

    _name = "clusters"

    def describe(self) -> list[Desc]:
        return [CLUSTER_STATUS_DESC, TOTAL_CLUSTERS_DESC]

    def collect(self) -> list[Metric]:
        clusters = self._fetch()
        if clusters is None:
            return []
        metrics = [gauge(TOTAL_CLUSTERS_DESC, len(clusters))]
        metrics.extend(_status_metric(c) for c in clusters)
        return metrics


class MastersCollector(_Collector):
    """Emits the number of master nodes of each cluster."""

    _name = "masters"
    _failure = "Failed to get cluster metrics for masters"

    def describe(self) -> list[Desc]:
        return [CLUSTER_MASTERS_DESC]

    def collect(self) -> list[Metric]:
        clusters = self._fetch()
        if clusters is None:
            return []
        return [_masters_metric(c) for c in clusters]


class NodesCollector(_Collector):
    """Emits the number of worker nodes of each cluster."""

    _name = "nodes"
    _failure = "Failed to get cluster metrics for nodes"

    def describe(self) -> list[Desc]:
        return [CLUSTER_NODES_DESC]

    def collect(self) -> list[Metric]:
        clusters = self._fetch()
        if clusters is None:
            return []
        return [_nodes_metric(c) for c in clusters]


class ContainerInfraCollector(_Collector):
    """Queries once and emits up, total_clusters, cluster_status, masters and nodes."""

    _name = "container_infra"

    def describe(self) -> list[Desc]:
        return [
            UP_DESC,
            CLUSTER_STATUS_DESC,
            TOTAL_CLUSTERS_DESC,
            CLUSTER_MASTERS_DESC,
            CLUSTER_NODES_DESC,
        ]

    def collect(self) -> list[Metric]:
        clusters = self._fetch()
        if clusters is None:
            return [gauge(UP_DESC, 0)]
        metrics = [gauge(UP_DESC, 1), gauge(TOTAL_CLUSTERS_DESC, len(clusters))]
        for c in clusters:
            metrics.append(_status_metric(c))
            metrics.append(_masters_metric(c))
            metrics.append(_nodes_metric(c))
        return metrics