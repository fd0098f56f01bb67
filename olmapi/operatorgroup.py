"""OperatorGroup and OperatorCondition resources."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from olmapi.meta import (
    V1ALPHA2_GROUP_VERSION,
    V2_GROUP_VERSION,
    Condition,
    LabelSelector,
    ObjectMeta,
    ObjectReference,
)

OPERATOR_GROUP_ANNOTATION_KEY = "olm.operatorGroup"
OPERATOR_GROUP_NAMESPACE_ANNOTATION_KEY = "olm.operatorNamespace"
OPERATOR_GROUP_TARGETS_ANNOTATION_KEY = "olm.targetNamespaces"
OPERATOR_GROUP_PROVIDED_APIS_ANNOTATION_KEY = "olm.providedAPIs"
OPERATOR_GROUP_KIND = "OperatorGroup"

OPERATOR_CONDITION_KIND = "OperatorCondition"
UPGRADEABLE = "Upgradeable"


@dataclass
class OperatorGroupSpec:
    """How an OperatorGroup selects its target namespaces."""

    selector: LabelSelector | None = None
    target_namespaces: list[str] = field(default_factory=list)
    service_account_name: str = ""
    static_provided_apis: bool = False


@dataclass
class OperatorGroupStatus:
    namespaces: list[str] = field(default_factory=list)
    service_account_ref: ObjectReference | None = None
    last_updated: datetime | None = None


@dataclass
class OperatorGroup:
    """The unit of multitenancy for managed operators."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: OperatorGroupSpec = field(default_factory=OperatorGroupSpec)
    status: OperatorGroupStatus = field(default_factory=OperatorGroupStatus)
    api_version: str = str(V1ALPHA2_GROUP_VERSION)
    kind: str = OPERATOR_GROUP_KIND

    def build_target_namespaces(self) -> str:
        """Sort the status namespaces in place and join them with commas."""
        self.status.namespaces.sort()
        return ",".join(self.status.namespaces)

    def is_service_account_specified(self) -> bool:
        return self.spec.service_account_name != ""

    def has_service_account_synced(self) -> bool:
        """True if a service account is named and its reference is recorded."""
        return self.is_service_account_specified() and self.status.service_account_ref is not None


@dataclass
class OperatorConditionSpec:
    """State reported by an operator, and overrides set by an administrator."""

    service_accounts: list[str] = field(default_factory=list)
    deployments: list[str] = field(default_factory=list)
    overrides: list[Condition] = field(default_factory=list)
    conditions: list[Condition] = field(default_factory=list)


@dataclass
class OperatorConditionStatus:
    conditions: list[Condition] = field(default_factory=list)


@dataclass
class OperatorCondition:
    """Conveys the state of an operator to the lifecycle manager."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: OperatorConditionSpec = field(default_factory=OperatorConditionSpec)
    status: OperatorConditionStatus = field(default_factory=OperatorConditionStatus)
    api_version: str = str(V2_GROUP_VERSION)
    kind: str = OPERATOR_CONDITION_KIND