"""InstallPlan resources: the steps and conditions of installing a set of operators."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from olmapi.csv_types import CLUSTER_SERVICE_VERSION_KIND
from olmapi.meta import (
    V1ALPHA1_GROUP_VERSION,
    ConditionStatus,
    ObjectMeta,
    ObjectReference,
)

INSTALL_PLAN_KIND = "InstallPlan"
INSTALL_PLAN_API_VERSION = str(V1ALPHA1_GROUP_VERSION)
CRD_KIND = "CustomResourceDefinition"


class Approval(str, Enum):
    """User approval policy for an InstallPlan."""

    AUTOMATIC = "Automatic"
    MANUAL = "Manual"

    def __str__(self) -> str:
        return self.value


class InstallPlanPhase(str, Enum):
    """Current status of an InstallPlan as a whole."""

    NONE = ""
    PLANNING = "Planning"
    REQUIRES_APPROVAL = "RequiresApproval"
    INSTALLING = "Installing"
    COMPLETE = "Complete"
    FAILED = "Failed"

    def __str__(self) -> str:
        return self.value


class InstallPlanConditionType(str, Enum):
    RESOLVED = "Resolved"
    INSTALLED = "Installed"

    def __str__(self) -> str:
        return self.value


class InstallPlanConditionReason(str, Enum):
    PLAN_UNKNOWN = "PlanUnknown"
    INSTALL_CHECK_FAILED = "InstallCheckFailed"
    DEPENDENCY_CONFLICT = "DependenciesConflict"
    COMPONENT_FAILED = "InstallComponentFailed"

    def __str__(self) -> str:
        return self.value


class StepStatus(str, Enum):
    """Current status of one resource in an InstallPlan."""

    UNKNOWN = "Unknown"
    NOT_PRESENT = "NotPresent"
    PRESENT = "Present"
    CREATED = "Created"
    NOT_CREATED = "NotCreated"
    WAITING_FOR_API = "WaitingForApi"
    UNSUPPORTED_RESOURCE = "UnsupportedResource"

    def __str__(self) -> str:
        return self.value


class InvalidInstallPlanError(ValueError):
    """Raised when an InstallPlan does not contain valid data."""

    def __init__(self, message: str = "the InstallPlan contains invalid data") -> None:
        super().__init__(message)


@dataclass
class InstallPlanSpec:
    """The set of resources to be installed."""

    catalog_source: str = ""
    catalog_source_namespace: str = ""
    cluster_service_version_names: list[str] = field(default_factory=list)
    approval: str = ""
    approved: bool = False
    generation: int = 0


@dataclass
class InstallPlanCondition:
    """Overall status of the execution of an InstallPlan."""

    type: str = ""
    status: str = ""
    last_update_time: datetime | None = None
    last_transition_time: datetime | None = None
    reason: str = ""
    message: str = ""


@dataclass
class StepResource:
    """A resource tracked by an InstallPlan."""

    catalog_source: str = ""
    catalog_source_namespace: str = ""
    group: str = ""
    version: str = ""
    kind: str = ""
    name: str = ""
    manifest: str = ""

    def __str__(self) -> str:
        return (
            f"{self.name}[{self.group}/{self.version}/{self.kind} "
            f"({self.catalog_source}/{self.catalog_source_namespace})]"
        )


@dataclass
class Step:
    """The status of one step in an InstallPlan."""

    resolving: str = ""
    resource: StepResource = field(default_factory=StepResource)
    optional: bool = False
    status: str = ""

    def __str__(self) -> str:
        return f"{self.resolving}: {self.resource} ({self.status})"


class BundleLookupConditionType(str, Enum):
    PENDING = "BundleLookupPending"

    def __str__(self) -> str:
        return self.value


@dataclass
class BundleLookupCondition:
    type: str
    status: str
    reason: str = ""
    message: str = ""
    last_update_time: datetime | None = None
    last_transition_time: datetime | None = None


@dataclass
class BundleLookup:
    """A request to pull and unpack the content of a bundle."""

    path: str = ""
    identifier: str = ""
    replaces: str = ""
    catalog_source_ref: ObjectReference | None = None
    conditions: list[BundleLookupCondition] = field(default_factory=list)
    properties: str = ""

    def get_condition(self, condition_type: str) -> BundleLookupCondition:
        """The condition of the given type, or one with Unknown status."""
        for cond in self.conditions:
            if cond.type == condition_type:
                return cond
        return BundleLookupCondition(type=condition_type, status=ConditionStatus.UNKNOWN)

    def remove_condition(self, condition_type: str) -> None:
        """Remove the first condition of the given type, if any."""
        for index, cond in enumerate(self.conditions):
            if cond.type == condition_type:
                del self.conditions[index]
                return

    def set_condition(self, cond: BundleLookupCondition) -> BundleLookupCondition:
        """Replace the condition of the same type, or append it."""
        for index, existing in enumerate(self.conditions):
            if existing.type != cond.type:
                continue
            if existing.status == cond.status:
                cond = replace(cond, last_transition_time=existing.last_transition_time)
            self.conditions[index] = cond
            return cond
        self.conditions.append(cond)
        return cond


@dataclass
class InstallPlanStatus:
    """Status of the steps required to complete an installation."""

    phase: str = InstallPlanPhase.NONE
    conditions: list[InstallPlanCondition] = field(default_factory=list)
    catalog_sources: list[str] = field(default_factory=list)
    plan: list[Step] = field(default_factory=list)
    bundle_lookups: list[BundleLookup] = field(default_factory=list)
    attenuated_service_account_ref: ObjectReference | None = None
    start_time: datetime | None = None
    message: str = ""

    def get_condition(self, condition_type: str) -> InstallPlanCondition:
        """The condition of the given type, or one with Unknown status."""
        for cond in self.conditions:
            if cond.type == condition_type:
                return cond
        return InstallPlanCondition(type=condition_type, status=ConditionStatus.UNKNOWN)

    def set_condition(self, cond: InstallPlanCondition) -> InstallPlanCondition:
        """Add or update a condition, merging on its type."""
        for index, existing in enumerate(self.conditions):
            if existing.type != cond.type:
                continue
            if existing.status == cond.status:
                cond = replace(cond, last_transition_time=existing.last_transition_time)
            self.conditions[index] = cond
            return cond
        self.conditions.append(cond)
        return cond

    def needs_requeue(self) -> bool:
        """True if any step is waiting for an API to become available."""
        return any(step.status == StepStatus.WAITING_FOR_API for step in self.plan)


def order_steps(steps: list[Step]) -> list[Step]:
    """Order steps: CSVs first, then CRDs, then everything else."""
    csvs = [step for step in steps if step.resource.kind == CLUSTER_SERVICE_VERSION_KIND]
    crds = [step for step in steps if step.resource.kind == CRD_KIND]
    others = [
        step
        for step in steps
        if step.resource.kind not in (CLUSTER_SERVICE_VERSION_KIND, CRD_KIND)
    ]
    return csvs + crds + others


def condition_failed(
    cond: str, reason: str, message: str, now: datetime | None
) -> InstallPlanCondition:
    return InstallPlanCondition(
        type=cond,
        status=ConditionStatus.FALSE,
        reason=reason,
        message=message,
        last_update_time=now,
        last_transition_time=now,
    )


def condition_met(cond: str, now: datetime | None) -> InstallPlanCondition:
    return InstallPlanCondition(
        type=cond,
        status=ConditionStatus.TRUE,
        last_update_time=now,
        last_transition_time=now,
    )


@dataclass
class InstallPlan:
    """The installation of a set of operators."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: InstallPlanSpec = field(default_factory=InstallPlanSpec)
    status: InstallPlanStatus = field(default_factory=InstallPlanStatus)
    api_version: str = INSTALL_PLAN_API_VERSION
    kind: str = INSTALL_PLAN_KIND

    def ensure_catalog_source(self, source_name: str) -> None:
        """Record the catalog source in the status unless already present."""
        if source_name not in self.status.catalog_sources:
            self.status.catalog_sources.append(source_name)