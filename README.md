# osdbexporter

Gauges describing an OpenStack cloud, computed from rows read out of the
service databases and rendered in the Prometheus text exposition format.

## Modules

- `osdbexporter.metrics`: the building blocks.
  - `Desc` describes a metric family (`fq_name`, `help`, `variable_labels`).
  - `Metric` is one gauge sample (`desc`, `value`, `label_values`, with
    `name` and `labels` properties).
  - `build_fq_name(namespace, subsystem, name)` joins the non-empty parts with
    underscores.
  - `gauge(desc, value, *label_values)` builds a sample; it raises
    `ValueError` when the number of label values does not match the
    description and `TypeError` when a label value is not a string.
  - `status_to_value(status, statuses)` returns the position of a status in a
    list, or -1 when it is unknown.
  - `render_text(metrics)` renders samples as exposition text, families sorted
    by name and samples sorted by their label values.
- `osdbexporter.keystone` (identity): `DomainsCollector`, `ProjectsCollector`,
  `GroupsCollector`, `RegionsCollector`, `UsersCollector`, and
  `IdentityCollector`, which runs all five and adds an `openstack_identity_up`
  gauge that is 0 when any of them fails. Rows are `Domain`, `Project`,
  `Group`, `Region` and `User`.
- `osdbexporter.magnum` (container infrastructure): `ContainerInfraCollector`
  queries once and emits `up`, `total_clusters`, `cluster_status`,
  `cluster_masters` and `cluster_nodes`; `ClustersCollector`,
  `MastersCollector` and `NodesCollector` emit parts of that set. Rows are
  `Cluster`. `map_cluster_status_value` and `format_count` are public helpers.
- `osdbexporter.manila` (shared file systems): `SharesCollector` emits
  `share_gb` and `share_status` per share, a `share_status_counter` for every
  known share status, `shares_counter` and `up`. Rows are `Share`.

## Usage

Every collector takes a queries object and an optional `logging.Logger`.
The queries object provides the methods the collector calls, each returning
a sequence of rows:

- identity: `get_domain_metrics()`, `get_project_metrics()`,
  `get_group_metrics()`, `get_region_metrics()`, `get_user_metrics()`
- container infrastructure: `get_cluster_metrics()`
- shared file systems: `get_share_metrics()`

`describe()` returns the list of `Desc` objects a collector can emit and
`collect()` returns the list of `Metric` samples.

```python
from osdbexporter.keystone import Domain, DomainsCollector
from osdbexporter.metrics import render_text


class Rows:
    def get_domain_metrics(self):
        return [Domain(id="default", name="Default", description="Default domain", enabled=True)]


print(render_text(DomainsCollector(Rows()).collect()), end="")
```

```
# HELP openstack_identity_domain_info domain_info
# TYPE openstack_identity_domain_info gauge
openstack_identity_domain_info{description="Default domain",enabled="true",id="default",name="Default"} 1
# HELP openstack_identity_domains domains
# TYPE openstack_identity_domains gauge
openstack_identity_domains 1
```

## Failures

When a query raises, the error is logged and:

- the individual identity collectors re-raise it; `IdentityCollector` catches
  it, keeps the samples of the collectors that succeeded and sets `up` to 0;
- `ClustersCollector`, `MastersCollector` and `NodesCollector` return no
  samples; `ContainerInfraCollector` returns only `up` set to 0;
- `SharesCollector` returns only `up` set to 0.

## Status values

Status gauges use a fixed list of known statuses: a status maps to its
position in the list and anything unknown maps to -1. Cluster statuses are in
`osdbexporter.magnum.KNOWN_CLUSTER_STATUSES`; the share status gauge uses
`osdbexporter.manila.VOLUME_STATUSES`, while the per-status counters cover
`osdbexporter.manila.SHARE_STATUSES`.

## What this package does not do

It does not connect to any database, run SQL, or serve metrics over HTTP, and
it has no command-line program. You supply the queries objects that return
rows, and you decide where the text from `render_text` goes.

## Installation

```
pip install .
```

The package has no runtime dependencies.

## Running the tests

```
pip install .[test]
pytest
```