"""Shared file system collector: share sizes, statuses and status counters."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Protocol, Sequence

from .metrics import Desc, Metric, build_fq_name, gauge, status_to_value

NAMESPACE = "openstack"
SUBSYSTEM = "sharev2"

_log = logging.getLogger(__name__)

# The share_status gauge deliberately uses the volume status list.
VOLUME_STATUSES: tuple[str, ...] = (
    "creating",
    "available",
    "attaching",
    "detaching",
    "in-use",
    "maintenance",
    "deleting",
    "awaiting-transfer",
    "error",
    "error_deleting",
    "backing-up",
    "restoring-backup",
    "error_backing-up",
    "error_restoring",
    "error_extending",
    "downloading",
    "uploading",
    "retyping",
    "extending",
)

SHARE_STATUSES: tuple[str, ...] = (
    "available",
    "creating",
    "deleting",
    "error",
    "error_deleting",
    "extending",
    "inactive",
    "managing",
    "migrating",
    "migration_error",
    "restoring",
    "reverting",
    "reverting_error",
    "reverting_to_snapshot",
    "shrinking",
    "shrinking_error",
    "soft_deleting",
    "unmanaging",
    "updating",
)


def _desc(name: str, labels: Sequence[str] = ()) -> Desc:
    return Desc(build_fq_name(NAMESPACE, SUBSYSTEM, name), name, tuple(labels))


UP_DESC = _desc("up")
SHARE_GB_DESC = _desc(
    "share_gb",
    (
        "id",
        "name",
        "status",
        "availability_zone",
        "share_type",
        "share_proto",
        "share_type_name",
        "project_id",
    ),
)
SHARE_STATUS_DESC = _desc(
    "share_status",
    (
        "id",
        "name",
        "status",
        "size",
        "share_type",
        "share_proto",
        "share_type_name",
        "project_id",
    ),
)
SHARE_STATUS_COUNTER_DESC = _desc("share_status_counter", ("status",))
SHARES_COUNTER_DESC = _desc("shares_counter")


@dataclass(frozen=True)
class Share:
    id: str
    name: str | None
    project_id: str | None
    size: int | None
    share_proto: str | None
    status: str | None
    share_type: str
    share_type_name: str
    availability_zone: str


class ManilaQueries(Protocol):
    """The query the shares collector runs."""

    def get_share_metrics(self) -> Sequence[Share]: ...


class SharesCollector:
    """Emits per-share size and status gauges plus per-status and total counters."""

    def __init__(self, queries: ManilaQueries, logger: logging.Logger | None = None) -> None:
        self.queries = queries
        self._logger = logging.LoggerAdapter(
            logger or _log,
            {"namespace": NAMESPACE, "subsystem": SUBSYSTEM, "collector": "shares"},
        )

    def describe(self) -> list[Desc]:
        return [
            UP_DESC,
            SHARE_GB_DESC,
            SHARE_STATUS_DESC,
            SHARE_STATUS_COUNTER_DESC,
            SHARES_COUNTER_DESC,
        ]

    def collect(self) -> list[Metric]:
        try:
            shares = list(self.queries.get_share_metrics())
        except Exception as err:
            self._logger.error("Failed to collect manila shares: %s", err)
            return [gauge(UP_DESC, 0)]

        metrics = [gauge(UP_DESC, 1)]
        counts: Counter[str] = Counter()

        for share in shares:
            name = share.name or ""
            project_id = share.project_id or ""
            share_proto = share.share_proto or ""
            status = share.status or ""
            size = share.size if share.size is not None else 0

            if status:
                counts[status] += 1

            metrics.append(
                gauge(
                    SHARE_GB_DESC,
                    size,
                    share.id,
                    name,
                    status,
                    share.availability_zone,
                    share.share_type,
                    share_proto,
                    share.share_type_name,
                    project_id,
                )
            )
            metrics.append(
                gauge(
                    SHARE_STATUS_DESC,
                    status_to_value(status, VOLUME_STATUSES),
                    share.id,
                    name,
                    status,
                    str(int(size)),
                    share.share_type,
                    share_proto,
                    share.share_type_name,
                    project_id,
                )
            )

        metrics.extend(
            gauge(SHARE_STATUS_COUNTER_DESC, counts[status], status)
            for status in SHARE_STATUSES
        )
        metrics.append(gauge(SHARES_COUNTER_DESC, len(shares)))
        return metrics