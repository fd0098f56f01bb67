"""Subscriptions: keeping an installed operator up to date from a catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from olmapi.installplan import Approval
from olmapi.meta import (
    V1ALPHA1_GROUP_VERSION,
    ConditionStatus,
    LabelSelector,
    ObjectMeta,
    ObjectReference,
)

SUBSCRIPTION_KIND = "Subscription"
SUBSCRIPTION_CRD_API_VERSION = str(V1ALPHA1_GROUP_VERSION)

SUBSCRIPTION_REASON_INVALID_CATALOG = "InvalidCatalog"
SUBSCRIPTION_REASON_UPGRADE_SUCCEEDED = "UpgradeSucceeded"

# Reasons recorded on subscription conditions.
NO_CATALOG_SOURCES_FOUND = "NoCatalogSourcesFound"
ALL_CATALOG_SOURCES_HEALTHY = "AllCatalogSourcesHealthy"
CATALOG_SOURCES_ADDED = "CatalogSourcesAdded"
CATALOG_SOURCES_UPDATED = "CatalogSourcesUpdated"
CATALOG_SOURCES_DELETED = "CatalogSourcesDeleted"
UNHEALTHY_CATALOG_SOURCE_FOUND = "UnhealthyCatalogSourceFound"
REFERENCED_INSTALL_PLAN_NOT_FOUND = "ReferencedInstallPlanNotFound"
INSTALL_PLAN_NOT_YET_RECONCILED = "InstallPlanNotYetReconciled"
INSTALL_PLAN_FAILED = "InstallPlanFailed"


class SubscriptionState(str, Enum):
    """Whether updates are available, installing, or the operator is current."""

    NONE = ""
    FAILED = "UpgradeFailed"
    UPGRADE_AVAILABLE = "UpgradeAvailable"
    UPGRADE_PENDING = "UpgradePending"
    AT_LATEST = "AtLatestKnown"

    def __str__(self) -> str:
        return self.value


@dataclass
class SubscriptionConfig:
    """Overrides applied to the pods of the subscribed operator."""

    selector: LabelSelector | None = None
    node_selector: dict[str, str] = field(default_factory=dict)
    tolerations: list[dict[str, Any]] = field(default_factory=list)
    resources: dict[str, Any] | None = None
    env_from: list[dict[str, Any]] = field(default_factory=list)
    env: list[dict[str, Any]] = field(default_factory=list)
    volumes: list[dict[str, Any]] = field(default_factory=list)
    volume_mounts: list[dict[str, Any]] = field(default_factory=list)
    affinity: dict[str, Any] | None = None


@dataclass
class SubscriptionSpec:
    """The package, channel and catalog a subscription follows."""

    catalog_source: str
    catalog_source_namespace: str
    package: str
    channel: str = ""
    starting_csv: str = ""
    install_plan_approval: str = ""
    config: SubscriptionConfig | None = None


class SubscriptionConditionType(str, Enum):
    """An abnormal-true state condition of a subscription."""

    CATALOG_SOURCES_UNHEALTHY = "CatalogSourcesUnhealthy"
    INSTALL_PLAN_MISSING = "InstallPlanMissing"
    INSTALL_PLAN_PENDING = "InstallPlanPending"
    INSTALL_PLAN_FAILED = "InstallPlanFailed"
    RESOLUTION_FAILED = "ResolutionFailed"

    def __str__(self) -> str:
        return self.value


@dataclass
class SubscriptionCondition:
    """The latest observation of one aspect of a subscription's state."""

    type: str
    status: str
    reason: str = ""
    message: str = ""
    last_heartbeat_time: datetime | None = None
    last_transition_time: datetime | None = None

    def equals(self, condition: SubscriptionCondition) -> bool:
        """Compare type, status, reason and message only."""
        return (
            self.type == condition.type
            and self.status == condition.status
            and self.reason == condition.reason
            and self.message == condition.message
        )


@dataclass
class InstallPlanReference:
    api_version: str
    kind: str
    name: str
    uid: str


@dataclass
class SubscriptionCatalogHealth:
    """The health of one catalog source known to a subscription."""

    catalog_source_ref: ObjectReference | None
    last_updated: datetime | None
    healthy: bool

    def equals(self, health: SubscriptionCatalogHealth) -> bool:
        """Compare health and the referenced catalog source's UID only."""
        if self.catalog_source_ref is None or health.catalog_source_ref is None:
            raise ValueError("catalog health has no catalog source reference")
        return (
            self.healthy == health.healthy
            and self.catalog_source_ref.uid == health.catalog_source_ref.uid
        )


@dataclass
class SubscriptionStatus:
    """Observed status of a subscription."""

    current_csv: str = ""
    installed_csv: str = ""
    install: InstallPlanReference | None = None
    state: str = SubscriptionState.NONE
    reason: str = ""
    install_plan_generation: int = 0
    install_plan_ref: ObjectReference | None = None
    catalog_health: list[SubscriptionCatalogHealth] = field(default_factory=list)
    conditions: list[SubscriptionCondition] = field(default_factory=list)
    last_updated: datetime | None = None

    def get_condition(self, condition_type: str) -> SubscriptionCondition:
        """The condition of the given type, or one with Unknown status."""
        for cond in self.conditions:
            if cond.type == condition_type:
                return cond
        return SubscriptionCondition(type=condition_type, status=ConditionStatus.UNKNOWN)

    def set_condition(self, condition: SubscriptionCondition) -> None:
        """Replace the condition of the same type, or append it."""
        for index, cond in enumerate(self.conditions):
            if cond.type == condition.type:
                self.conditions[index] = condition
                return
        self.conditions.append(condition)

    def remove_conditions(self, *args: str) -> None:
        """Remove every condition whose type is among the given ones."""
        excluded = set(args)
        self.conditions = [cond for cond in self.conditions if cond.type not in excluded]


@dataclass
class Subscription:
    """Keeps an operator up to date by tracking changes to catalogs."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: SubscriptionSpec | None = None
    status: SubscriptionStatus = field(default_factory=SubscriptionStatus)
    api_version: str = SUBSCRIPTION_CRD_API_VERSION
    kind: str = SUBSCRIPTION_KIND

    def get_install_plan_approval(self) -> Approval:
        """The configured approval, Automatic unless Manual was asked for."""
        if self.spec is None:
            raise ValueError("subscription has no spec")
        if self.spec.install_plan_approval == Approval.MANUAL:
            return Approval.MANUAL
        return Approval.AUTOMATIC


def new_install_plan_reference(ref: ObjectReference) -> InstallPlanReference:
    """Build an InstallPlanReference from an object reference."""
    return InstallPlanReference(
        api_version=ref.api_version,
        kind=ref.kind,
        name=ref.name,
        uid=ref.uid,
    )