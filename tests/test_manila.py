import logging

import pytest

from osdbexporter.manila import Share, SharesCollector
from osdbexporter.metrics import render_text

_COUNTER_STATUSES = [
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
]


class _FakeQueries:
    def __init__(self, shares=(), error=None):
        self._shares = list(shares)
        self._error = error
        self.calls = 0

    def get_share_metrics(self):
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._shares


def _counter_block(counts):
    lines = [
        "# HELP openstack_sharev2_share_status_counter share_status_counter",
        "# TYPE openstack_sharev2_share_status_counter gauge",
    ]
    lines.extend(
        f'openstack_sharev2_share_status_counter{{status="{s}"}} {counts.get(s, 0)}'
        for s in _COUNTER_STATUSES
    )
    return "".join(line + "\n" for line in lines)


def _tail(total, up=1):
    return (
        "# HELP openstack_sharev2_shares_counter shares_counter\n"
        "# TYPE openstack_sharev2_shares_counter gauge\n"
        f"openstack_sharev2_shares_counter {total}\n"
        "# HELP openstack_sharev2_up up\n"
        "# TYPE openstack_sharev2_up gauge\n"
        f"openstack_sharev2_up {up}\n"
    )


def _collect(shares=(), error=None):
    return render_text(SharesCollector(_FakeQueries(shares, error)).collect())


def test_single_share():
    share = Share(
        id="4be93e2e-ffff-ffff-ffff-603e3ec2a5d6",
        name="share-test",
        project_id="ffff8fa0ca1a468db8ad00970c1effff",
        size=1,
        share_proto="NFS",
        status="available",
        share_type="az1",
        share_type_name="",
        availability_zone="az1",
    )
    expected = (
        "# HELP openstack_sharev2_share_gb share_gb\n"
        "# TYPE openstack_sharev2_share_gb gauge\n"
        'openstack_sharev2_share_gb{availability_zone="az1",id="4be93e2e-ffff-ffff-ffff-603e3ec2a5d6",'
        'name="share-test",project_id="ffff8fa0ca1a468db8ad00970c1effff",share_proto="NFS",'
        'share_type="az1",share_type_name="",status="available"} 1\n'
        "# HELP openstack_sharev2_share_status share_status\n"
        "# TYPE openstack_sharev2_share_status gauge\n"
        'openstack_sharev2_share_status{id="4be93e2e-ffff-ffff-ffff-603e3ec2a5d6",name="share-test",'
        'project_id="ffff8fa0ca1a468db8ad00970c1effff",share_proto="NFS",share_type="az1",'
        'share_type_name="",size="1",status="available"} 1\n'
        + _counter_block({"available": 1})
        + _tail(1)
    )
    assert _collect([share]) == expected


def test_multiple_shares():
    shares = [
        Share("share-1", "test-share-1", "project-1", 10, "NFS", "available", "type-uuid-1", "default", "nova"),
        Share("share-2", "test-share-2", "project-2", 20, "CIFS", "creating", "type-uuid-2", "ssd", "nova"),
        Share("share-3", "test-share-3", "project-1", 5, "NFS", "error", "type-uuid-1", "default", "nova"),
    ]
    expected = (
        "# HELP openstack_sharev2_share_gb share_gb\n"
        "# TYPE openstack_sharev2_share_gb gauge\n"
        'openstack_sharev2_share_gb{availability_zone="nova",id="share-1",name="test-share-1",project_id="project-1",share_proto="NFS",share_type="type-uuid-1",share_type_name="default",status="available"} 10\n'
        'openstack_sharev2_share_gb{availability_zone="nova",id="share-2",name="test-share-2",project_id="project-2",share_proto="CIFS",share_type="type-uuid-2",share_type_name="ssd",status="creating"} 20\n'
        'openstack_sharev2_share_gb{availability_zone="nova",id="share-3",name="test-share-3",project_id="project-1",share_proto="NFS",share_type="type-uuid-1",share_type_name="default",status="error"} 5\n'
        "# HELP openstack_sharev2_share_status share_status\n"
        "# TYPE openstack_sharev2_share_status gauge\n"
        'openstack_sharev2_share_status{id="share-1",name="test-share-1",project_id="project-1",share_proto="NFS",share_type="type-uuid-1",share_type_name="default",size="10",status="available"} 1\n'
        'openstack_sharev2_share_status{id="share-2",name="test-share-2",project_id="project-2",share_proto="CIFS",share_type="type-uuid-2",share_type_name="ssd",size="20",status="creating"} 0\n'
        'openstack_sharev2_share_status{id="share-3",name="test-share-3",project_id="project-1",share_proto="NFS",share_type="type-uuid-1",share_type_name="default",size="5",status="error"} 8\n'
        + _counter_block({"available": 1, "creating": 1, "error": 1})
        + _tail(3)
    )
    assert _collect(shares) == expected


def test_no_shares():
    assert _collect([]) == _counter_block({}) + _tail(0)


def test_null_values():
    share = Share("share-null", None, None, None, None, None, "", "", "")
    expected = (
        "# HELP openstack_sharev2_share_gb share_gb\n"
        "# TYPE openstack_sharev2_share_gb gauge\n"
        'openstack_sharev2_share_gb{availability_zone="",id="share-null",name="",project_id="",share_proto="",share_type="",share_type_name="",status=""} 0\n'
        "# HELP openstack_sharev2_share_status share_status\n"
        "# TYPE openstack_sharev2_share_status gauge\n"
        'openstack_sharev2_share_status{id="share-null",name="",project_id="",share_proto="",share_type="",share_type_name="",size="0",status=""} -1\n'
        + _counter_block({})
        + _tail(1)
    )
    assert _collect([share]) == expected


def test_database_error_reports_down(caplog):
    with caplog.at_level(logging.ERROR):
        text = _collect(error=ConnectionError("connection closed"))
    assert text == (
        "# HELP openstack_sharev2_up up\n"
        "# TYPE openstack_sharev2_up gauge\n"
        "openstack_sharev2_up 0\n"
    )
    assert "Failed to collect manila shares" in caplog.text


def test_unknown_status_not_counted_but_share_is():
    share = Share("s1", "n", "p", 3, "NFS", "weird", "t", "tn", "az")
    metrics = SharesCollector(_FakeQueries([share])).collect()
    counters = {
        m.labels["status"]: m.value
        for m in metrics
        if m.name == "openstack_sharev2_share_status_counter"
    }
    assert set(counters) == set(_COUNTER_STATUSES)
    assert sum(counters.values()) == 0
    total = [m.value for m in metrics if m.name == "openstack_sharev2_shares_counter"]
    assert total == [1.0]
    status = [m for m in metrics if m.name == "openstack_sharev2_share_status"]
    assert status[0].value == -1.0


def test_metric_count_per_share():
    shares = [
        Share(f"s{i}", "n", "p", i, "NFS", "available", "t", "tn", "az") for i in range(2)
    ]
    queries = _FakeQueries(shares)
    metrics = SharesCollector(queries).collect()
    # up + shares_counter + 19 status counters + 2 per share
    assert len(metrics) == 1 + 1 + 19 + 4
    assert queries.calls == 1


def test_describe_lists_all_families():
    names = [d.fq_name for d in SharesCollector(_FakeQueries()).describe()]
    assert names == [
        "openstack_sharev2_up",
        "openstack_sharev2_share_gb",
        "openstack_sharev2_share_status",
        "openstack_sharev2_share_status_counter",
        "openstack_sharev2_shares_counter",
    ]


@pytest.mark.parametrize(
    "status,value",
    [("creating", 0.0), ("available", 1.0), ("in-use", 4.0), ("extending", 18.0), ("inactive", -1.0)],
)
def test_share_status_uses_volume_status_order(status, value):
    share = Share("s", "n", "p", 1, "NFS", status, "t", "tn", "az")
    metrics = SharesCollector(_FakeQueries([share])).collect()
    [status_metric] = [m for m in metrics if m.name == "openstack_sharev2_share_status"]
    assert status_metric.value == value