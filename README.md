# olmapi

Python data types and helpers for Operator Lifecycle Manager (OLM)
resources in the `operators.coreos.com` API group. Resources are plain
dataclasses; enumerations are `str` enums, so their members compare equal
to the strings stored in manifests.

The package has no runtime dependencies. Its tests use pytest, which the
`test` extra installs.

## Modules

- `olmapi.errors` – validation findings. `ValidationError` (an exception
  and a dataclass) carries an `ErrorType`, a `Level` (`Error` or
  `Warning`), a field, a bad value and a detail, and renders as text such
  as `Error: Field spec.provider: provider is required`. `ManifestResult`
  sorts added findings into `errors` and `warnings` by level. Constructors
  such as `new_error`, `err_invalid_csv`, `warn_field_missing` and
  `warn_properties_annotation_used` build findings of each type.
- `olmapi.meta` – `GroupVersion`, `GroupVersionKind`,
  `GroupVersionResource`, `GroupKind`, `GroupResource`, and the helpers
  `kind` and `resource` that qualify a name with a group; shared
  `ObjectMeta`, `ObjectReference`, `Condition`, `ConditionStatus` and
  `LabelSelector`; and `parse_duration` / `format_duration` for duration
  strings such as `"15m"`, `"1h30m"` or `"-1.5s"` (malformed text raises
  `ValueError`).
- `olmapi.csv_types` – the spec side of a ClusterServiceVersion:
  `InstallModeType`, `InstallMode`, the deployment install strategy, CRD
  and API service descriptions, and `WebhookDescription`, which builds a
  `ValidatingWebhook` or `MutatingWebhook` pointing at the service
  `<deployment-name-with-hyphens>-service`.
- `olmapi.csv` – `ClusterServiceVersion` and its status. `set_phase`
  records a condition when phase or reason changes and keeps at most 20
  conditions; `set_phase_with_event` and
  `set_phase_with_event_if_changed` also report to an `EventRecorder`,
  which keeps the events in a list. Queries include `is_obsolete`,
  `is_copied`, `is_uncopiable`, `owns_crd`, `owns_api_service` and the
  sorted, deduplicated `get_all_crd_descriptions` and
  `get_*_api_service_descriptions`. `InstallModeSet.supports` raises
  `ValueError` when the set cannot watch the given namespaces, and
  `new_install_mode_set` raises it on duplicate mode types.
- `olmapi.installplan` – `InstallPlan`, its `Step`s, conditions and
  bundle lookups; `order_steps` puts CSVs first, then CRDs, then the rest;
  `condition_met` and `condition_failed` build conditions.
- `olmapi.subscription` – `Subscription`, its status and conditions,
  catalog health, and `new_install_plan_reference`.
- `olmapi.operatorgroup` – `OperatorGroup` (with
  `build_target_namespaces` and service-account checks) and
  `OperatorCondition`.
- `olmapi.catalogsource` – `CatalogSource`, its spec and status,
  `UpdateStrategy.from_dict`, and the polling checks `poll` and `update`.

## Examples

Checking which namespaces an operator may watch:

```python
from olmapi.csv import InstallModeSet
from olmapi.csv_types import InstallModeType

modes = InstallModeSet({InstallModeType.OWN_NAMESPACE: True})
modes.supports("operators", ["operators"])   # returns None
modes.supports("operators", ["ns-0"])        # raises ValueError
```

Collecting validation findings:

```python
from olmapi.errors import ManifestResult, err_invalid_csv, warn_field_missing

result = ManifestResult(name="my-operator.v1.0.0")
result.add(
    err_invalid_csv("spec.install is missing", "my-operator.v1.0.0"),
    warn_field_missing("provider is recommended", "spec.provider", None),
)
result.has_error()   # True
result.has_warn()    # True
print(result.warnings[0])   # Warning: Field spec.provider: provider is recommended
```

Ordering install plan steps:

```python
from olmapi.installplan import Step, StepResource, order_steps

steps = [
    Step(resource=StepResource(kind="Service")),
    Step(resource=StepResource(kind="CustomResourceDefinition")),
    Step(resource=StepResource(kind="ClusterServiceVersion")),
]
[step.resource.kind for step in order_steps(steps)]
# ['ClusterServiceVersion', 'CustomResourceDefinition', 'Service']
```

Reading a catalog source update strategy:

```python
from olmapi.catalogsource import UpdateStrategy

strategy = UpdateStrategy.from_dict({"registryPoll": {"interval": "45m"}})
strategy.registry_poll.interval   # timedelta of 45 minutes
```

An interval that cannot be parsed falls back to 15 minutes, and the
reason is kept in `registry_poll.parsing_error`.

## What it does not do

The package only models resources and the decisions made on them. It
does not talk to a cluster, watch or store objects, or read and write
manifests as YAML or JSON (apart from `UpdateStrategy.from_dict`, which
takes an already parsed dictionary). It has no command-line tool, and it
does not validate whole bundles or package manifests: `olmapi.errors`
provides the result types for such checks, not the checks themselves.