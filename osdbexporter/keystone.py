"""Identity service collectors: domains, projects, groups, regions and users."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, Sequence

from .metrics import Desc, Metric, build_fq_name, gauge

NAMESPACE = "openstack"
SUBSYSTEM = "identity"

_log = logging.getLogger(__name__)


def _desc(name: str, labels: Sequence[str] = ()) -> Desc:
    return Desc(build_fq_name(NAMESPACE, SUBSYSTEM, name), name, tuple(labels))


UP_DESC = _desc("up")
DOMAINS_COUNT_DESC = _desc("domains")
DOMAIN_INFO_DESC = _desc("domain_info", ("description", "enabled", "id", "name"))
GROUPS_COUNT_DESC = _desc("groups")
PROJECTS_COUNT_DESC = _desc("projects")
PROJECT_INFO_DESC = _desc(
    "project_info",
    ("description", "domain_id", "enabled", "id", "is_domain", "name", "parent_id", "tags"),
)
REGIONS_COUNT_DESC = _desc("regions")
USERS_COUNT_DESC = _desc("users")


@dataclass(frozen=True)
class Domain:
    id: str
    name: str
    description: str
    enabled: bool | None


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    description: str
    enabled: bool | None
    domain_id: str
    parent_id: str
    is_domain: bool
    tags: str | None


@dataclass(frozen=True)
class Group:
    id: str
    domain_id: str
    name: str
    description: str | None


@dataclass(frozen=True)
class Region:
    id: str
    description: str
    parent_region_id: str | None


@dataclass(frozen=True)
class User:
    id: str
    enabled: bool | None
    domain_id: str
    default_project_id: str | None
    created_at: datetime | None
    last_active_at: datetime | None


class KeystoneQueries(Protocol):
    """The queries the identity collectors run against the database."""

    def get_domain_metrics(self) -> Sequence[Domain]: ...

    def get_project_metrics(self) -> Sequence[Project]: ...

    def get_group_metrics(self) -> Sequence[Group]: ...

    def get_region_metrics(self) -> Sequence[Region]: ...

    def get_user_metrics(self) -> Sequence[User]: ...


class _Collector:
    _name = ""

    def __init__(self, queries: KeystoneQueries, logger: logging.Logger | None = None) -> None:
        self.queries = queries
        self._logger = logging.LoggerAdapter(
            logger or _log,
            {"namespace": NAMESPACE, "subsystem": SUBSYSTEM, "collector": self._name},
        )

    def _fetch(self, query, what: str):
        try:
            return list(query())
        except Exception as err:
            self._logger.error("Failed to query %s: %s", what, err)
            raise


class DomainsCollector(_Collector):
    """Counts domains and emits one info sample per domain."""

    _name = "domains"

    def describe(self) -> list[Desc]:
        return [DOMAINS_COUNT_DESC, DOMAIN_INFO_DESC]

    def collect(self) -> list[Metric]:
        domains = self._fetch(self.queries.get_domain_metrics, "domains")
        metrics = [gauge(DOMAINS_COUNT_DESC, len(domains))]
        for d in domains:
            enabled = "true" if d.enabled else "false"
            metrics.append(gauge(DOMAIN_INFO_DESC, 1, d.description, enabled, d.id, d.name))
        return metrics


class GroupsCollector(_Collector):
    """Counts groups."""

    _name = "groups"

    def describe(self) -> list[Desc]:
        return [GROUPS_COUNT_DESC]

    def collect(self) -> list[Metric]:
        groups = self._fetch(self.queries.get_group_metrics, "groups")
        return [gauge(GROUPS_COUNT_DESC, len(groups))]


class ProjectsCollector(_Collector):
    """Counts projects and emits one info sample per project."""

    _name = "projects"

    def describe(self) -> list[Desc]:
        return [PROJECTS_COUNT_DESC, PROJECT_INFO_DESC]

    def collect(self) -> list[Metric]:
        projects = self._fetch(self.queries.get_project_metrics, "projects")
        metrics = [gauge(PROJECTS_COUNT_DESC, len(projects))]
        for p in projects:
            tags = p.tags if isinstance(p.tags, str) else ""
            enabled = "true" if p.enabled else "false"
            is_domain = "true" if p.is_domain else "false"
            metrics.append(
                gauge(
                    PROJECT_INFO_DESC,
                    1,
                    p.description,
                    p.domain_id,
                    enabled,
                    p.id,
                    is_domain,
                    p.name,
                    p.parent_id,
                    tags,
                )
            )
        return metrics


class RegionsCollector(_Collector):
    """Counts regions."""

    _name = "regions"

    def describe(self) -> list[Desc]:
        return [REGIONS_COUNT_DESC]

    def collect(self) -> list[Metric]:
        regions = self._fetch(self.queries.get_region_metrics, "regions")
        return [gauge(REGIONS_COUNT_DESC, len(regions))]


class UsersCollector(_Collector):
    """Counts users."""

    _name = "users"

    def describe(self) -> list[Desc]:
        return [USERS_COUNT_DESC]

    def collect(self) -> list[Metric]:
        users = self._fetch(self.queries.get_user_metrics, "users")
        return [gauge(USERS_COUNT_DESC, len(users))]


class IdentityCollector:
    """Runs every identity collector and reports a single ``up`` gauge.

    ``up`` is 1 when all sub-collectors succeed and 0 when any of them fails;
    the samples of the successful ones are still returned.
    """

    def __init__(self, queries: KeystoneQueries, logger: logging.Logger | None = None) -> None:
        self.queries = queries
        self.logger = logger or _log
        self.collectors = [
            DomainsCollector(queries, logger),
            ProjectsCollector(queries, logger),
            GroupsCollector(queries, logger),
            RegionsCollector(queries, logger),
            UsersCollector(queries, logger),
        ]

    def describe(self) -> list[Desc]:
        descs = [UP_DESC]
        for collector in self.collectors:
            descs.extend(collector.describe())
        return descs

    def collect(self) -> list[Metric]:
        metrics: list[Metric] = []
        failed = False
        for collector in self.collectors:
            try:
                metrics.extend(collector.collect())
            except Exception:
                failed = True
        metrics.append(gauge(UP_DESC, 0 if failed else 1))
        return metrics