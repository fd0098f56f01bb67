"""The ClusterServiceVersion resource: status, phase transitions and API queries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterable

from olmapi.csv_types import (
    CLUSTER_SERVICE_VERSION_API_VERSION,
    CLUSTER_SERVICE_VERSION_KIND,
    OPERATOR_GROUP_NAMESPACE_ANNOTATION_KEY,
    APIServiceDescription,
    ClusterServiceVersionSpec,
    CRDDescription,
    InstallMode,
    InstallModeType,
)
from olmapi.meta import ObjectMeta

COPIED_LABEL_KEY = "olm.copiedFrom"

# Oldest conditions are dropped once the history grows past this length.
CONDITIONS_LENGTH_LIMIT = 20

NAMESPACE_ALL = ""

EVENT_TYPE_NORMAL = "Normal"
EVENT_TYPE_WARNING = "Warning"


class ClusterServiceVersionPhase(str, Enum):
    """The condition of a ClusterServiceVersion at the current time."""

    NONE = ""
    PENDING = "Pending"
    INSTALL_READY = "InstallReady"
    INSTALLING = "Installing"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"
    REPLACING = "Replacing"
    DELETING = "Deleting"
    ANY = ""

    def __str__(self) -> str:
        return self.value


class ConditionReason(str, Enum):
    """A camel-cased reason for a state transition."""

    REQUIREMENTS_UNKNOWN = "RequirementsUnknown"
    REQUIREMENTS_NOT_MET = "RequirementsNotMet"
    REQUIREMENTS_MET = "AllRequirementsMet"
    OWNER_CONFLICT = "OwnerConflict"
    COMPONENT_FAILED = "InstallComponentFailed"
    COMPONENT_FAILED_NO_RETRY = "InstallComponentFailedNoRetry"
    INVALID_STRATEGY = "InvalidInstallStrategy"
    WAITING = "InstallWaiting"
    INSTALL_SUCCESSFUL = "InstallSucceeded"
    INSTALL_CHECK_FAILED = "InstallCheckFailed"
    COMPONENT_UNHEALTHY = "ComponentUnhealthy"
    BEING_REPLACED = "BeingReplaced"
    REPLACED = "Replaced"
    NEEDS_REINSTALL = "NeedsReinstall"
    NEEDS_CERT_ROTATION = "NeedsCertRotation"
    API_SERVICE_RESOURCE_ISSUE = "APIServiceResourceIssue"
    API_SERVICE_RESOURCES_NEED_REINSTALL = "APIServiceResourcesNeedReinstall"
    API_SERVICE_INSTALL_FAILED = "APIServiceInstallFailed"
    COPIED = "Copied"
    INVALID_INSTALL_MODES = "InvalidInstallModes"
    NO_TARGET_NAMESPACES = "NoTargetNamespaces"
    UNSUPPORTED_OPERATOR_GROUP = "UnsupportedOperatorGroup"
    NO_OPERATOR_GROUP = "NoOperatorGroup"
    TOO_MANY_OPERATOR_GROUPS = "TooManyOperatorGroups"
    INTER_OPERATOR_GROUP_OWNER_CONFLICT = "InterOperatorGroupOwnerConflict"
    CANNOT_MODIFY_STATIC_OPERATOR_GROUP_PROVIDED_APIS = (
        "CannotModifyStaticOperatorGroupProvidedAPIs"
    )
    DETECTED_CLUSTER_CHANGE = "DetectedClusterChange"
    INVALID_WEBHOOK_DESCRIPTION = "InvalidWebhookDescription"
    OPERATOR_CONDITION_NOT_UPGRADEABLE = "OperatorConditionNotUpgradeable"
    WAITING_FOR_CLEANUP_TO_COMPLETE = "WaitingOnCleanup"

    def __str__(self) -> str:
        return self.value


class StatusReason(str, Enum):
    """Reason for the status of a requirement or a dependent."""

    PRESENT = "Present"
    NOT_PRESENT = "NotPresent"
    PRESENT_NOT_SATISFIED = "PresentNotSatisfied"
    NOT_AVAILABLE = "PresentNotAvailable"
    SATISFIED = "Satisfied"
    NOT_SATISFIED = "NotSatisfied"

    def __str__(self) -> str:
        return self.value


_OBSOLETE_REASONS = frozenset({ConditionReason.REPLACED, ConditionReason.BEING_REPLACED})

_UNCOPIABLE_REASONS = frozenset(
    {
        ConditionReason.COPIED,
        ConditionReason.INVALID_INSTALL_MODES,
        ConditionReason.NO_TARGET_NAMESPACES,
        ConditionReason.UNSUPPORTED_OPERATOR_GROUP,
        ConditionReason.NO_OPERATOR_GROUP,
        ConditionReason.TOO_MANY_OPERATOR_GROUPS,
        ConditionReason.INTER_OPERATOR_GROUP_OWNER_CONFLICT,
        ConditionReason.CANNOT_MODIFY_STATIC_OPERATOR_GROUP_PROVIDED_APIS,
    }
)

_SAFE_TO_ANNOTATE_OPERATOR_GROUP_REASONS = frozenset(
    {
        ConditionReason.OWNER_CONFLICT,
        ConditionReason.INSTALL_SUCCESSFUL,
        ConditionReason.INVALID_INSTALL_MODES,
        ConditionReason.NO_TARGET_NAMESPACES,
        ConditionReason.UNSUPPORTED_OPERATOR_GROUP,
        ConditionReason.NO_OPERATOR_GROUP,
        ConditionReason.TOO_MANY_OPERATOR_GROUPS,
        ConditionReason.INTER_OPERATOR_GROUP_OWNER_CONFLICT,
        ConditionReason.CANNOT_MODIFY_STATIC_OPERATOR_GROUP_PROVIDED_APIS,
    }
)


@dataclass
class ClusterServiceVersionCondition:
    """A recorded state transition of a ClusterServiceVersion."""

    phase: str = ""
    message: str = ""
    reason: str = ""
    last_update_time: datetime | None = None
    last_transition_time: datetime | None = None


@dataclass
class DependentStatus:
    group: str
    version: str
    kind: str
    status: str
    uuid: str = ""
    message: str = ""


@dataclass
class RequirementStatus:
    group: str
    version: str
    kind: str
    name: str
    status: str
    message: str = ""
    uuid: str = ""
    dependents: list[DependentStatus] = field(default_factory=list)


@dataclass
class ResourceInstance:
    name: str
    namespace: str = ""


@dataclass
class ResourceList:
    """Resources of the same group and kind."""

    group: str
    kind: str
    instances: list[ResourceInstance] = field(default_factory=list)


@dataclass
class CleanupStatus:
    """Custom resources still blocking deletion of the CSV."""

    pending_deletion: list[ResourceList] = field(default_factory=list)


@dataclass
class ClusterServiceVersionStatus:
    """Observed status of a ClusterServiceVersion."""

    phase: str = ""
    message: str = ""
    reason: str = ""
    last_update_time: datetime | None = None
    last_transition_time: datetime | None = None
    conditions: list[ClusterServiceVersionCondition] = field(default_factory=list)
    requirement_status: list[RequirementStatus] = field(default_factory=list)
    certs_last_updated: datetime | None = None
    certs_rotate_at: datetime | None = None
    cleanup: CleanupStatus = field(default_factory=CleanupStatus)


class EventRecorder:
    """Collects events emitted about objects, in the order they arrive."""

    def __init__(self) -> None:
        self.events: list[tuple[Any, str, str, str]] = []

    def event(self, obj: Any, event_type: str, reason: str, message: str) -> None:
        self.events.append((obj, event_type, reason, message))


class InstallModeSet(dict):
    """Install mode types mapped to whether they are supported."""

    def _allows(self, mode: InstallModeType) -> bool:
        return bool(self.get(mode, False))

    def supports(self, operator_namespace: str, namespaces: list[str]) -> None:
        """Raise ValueError unless the set allows watching ``namespaces``."""
        count = len(namespaces)
        if count == 0:
            raise ValueError(
                "operatorgroup has invalid selected namespaces, "
                "cannot configure to watch zero namespaces"
            )
        if count == 1:
            namespace = namespaces[0]
            if namespace == operator_namespace:
                if not self._allows(InstallModeType.OWN_NAMESPACE):
                    raise ValueError(
                        f"{InstallModeType.OWN_NAMESPACE} InstallModeType not supported, "
                        "cannot configure to watch own namespace"
                    )
            elif namespace == NAMESPACE_ALL:
                if not self._allows(InstallModeType.ALL_NAMESPACES):
                    raise ValueError(
                        f"{InstallModeType.ALL_NAMESPACES} InstallModeType not supported, "
                        "cannot configure to watch all namespaces"
                    )
            elif not self._allows(InstallModeType.SINGLE_NAMESPACE):
                raise ValueError(
                    f"{InstallModeType.SINGLE_NAMESPACE} InstallModeType not supported, "
                    "cannot configure to watch one namespace"
                )
            return
        if not self._allows(InstallModeType.MULTI_NAMESPACE):
            raise ValueError(
                f"{InstallModeType.MULTI_NAMESPACE} InstallModeType not supported, "
                f"cannot configure to watch {count} namespaces"
            )
        for namespace in namespaces:
            if namespace == operator_namespace and not self._allows(
                InstallModeType.OWN_NAMESPACE
            ):
                raise ValueError(
                    f"{InstallModeType.OWN_NAMESPACE} InstallModeType not supported, "
                    "cannot configure to watch own namespace"
                )
            if namespace == NAMESPACE_ALL:
                raise ValueError(
                    "operatorgroup has invalid selected namespaces, "
                    "NamespaceAll found when |selected namespaces| > 1"
                )


def _format_modes(modes: Iterable[InstallMode]) -> str:
    parts = (f"{{{mode.type} {str(bool(mode.supported)).lower()}}}" for mode in modes)
    return "[" + " ".join(parts) + "]"


def new_install_mode_set(modes: list[InstallMode]) -> InstallModeSet:
    """Build an InstallModeSet; raise ValueError if a mode type repeats."""
    result = InstallModeSet()
    for mode in modes:
        if mode.type in result:
            raise ValueError(
                "InstallMode list contains duplicates, cannot make set: "
                + _format_modes(modes)
            )
        result[mode.type] = mode.supported
    return result


def _sorted_by_key(descriptions: dict[str, Any]) -> list[Any]:
    return [descriptions[key] for key in sorted(descriptions)]


@dataclass
class ClusterServiceVersion:
    """Describes how to install and run one version of an operator."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: ClusterServiceVersionSpec = field(default_factory=ClusterServiceVersionSpec)
    status: ClusterServiceVersionStatus = field(default_factory=ClusterServiceVersionStatus)
    api_version: str = CLUSTER_SERVICE_VERSION_API_VERSION
    kind: str = CLUSTER_SERVICE_VERSION_KIND

    def set_phase_with_event_if_changed(
        self,
        phase: str,
        reason: str,
        message: str,
        now: datetime | None,
        recorder: EventRecorder,
    ) -> None:
        """Set the phase and emit an event only if phase, reason or message change."""
        status = self.status
        if status.phase == phase and status.reason == reason and status.message == message:
            return
        self.set_phase_with_event(phase, reason, message, now, recorder)

    def set_phase_with_event(
        self,
        phase: str,
        reason: str,
        message: str,
        now: datetime | None,
        recorder: EventRecorder,
    ) -> None:
        """Emit an event about the phase change and set the phase."""
        event_type = (
            EVENT_TYPE_WARNING if phase == ClusterServiceVersionPhase.FAILED else EVENT_TYPE_NORMAL
        )
        recorder.event(self, event_type, str(reason), message)
        self.set_phase(phase, reason, message, now)

    def set_phase(
        self, phase: str, reason: str, message: str, now: datetime | None
    ) -> None:
        """Set the current phase and record a condition if it is new."""
        status = self.status

        def new_condition() -> ClusterServiceVersionCondition:
            return ClusterServiceVersionCondition(
                phase=status.phase,
                last_transition_time=status.last_transition_time,
                last_update_time=status.last_update_time,
                message=message,
                reason=reason,
            )

        try:
            status.last_update_time = now
            if status.phase != phase:
                status.phase = phase
                status.last_transition_time = now
            status.message = message
            status.reason = reason
            if not status.conditions:
                status.conditions.append(new_condition())
                return
            previous = status.conditions[-1]
            if previous.phase != status.phase or previous.reason != status.reason:
                status.conditions.append(new_condition())
        finally:
            self.trim_conditions_if_limit_exceeded()

    def set_requirement_status(self, statuses: list[RequirementStatus]) -> None:
        self.status.requirement_status = statuses

    def is_obsolete(self) -> bool:
        """True if this CSV is being replaced or was replaced."""
        return any(cond.reason in _OBSOLETE_REASONS for cond in self.status.conditions)

    def is_copied(self) -> bool:
        """True if this CSV is a copy placed into a target namespace."""
        annotations = self.metadata.annotations or {}
        if self.status.reason == ConditionReason.COPIED:
            return True
        if OPERATOR_GROUP_NAMESPACE_ANNOTATION_KEY in annotations and (
            self.metadata.namespace != annotations[OPERATOR_GROUP_NAMESPACE_ANNOTATION_KEY]
        ):
            return True
        return COPIED_LABEL_KEY in (self.metadata.labels or {})

    def is_uncopiable(self) -> bool:
        if self.status.phase == ClusterServiceVersionPhase.NONE:
            return True
        return self.status.reason in _UNCOPIABLE_REASONS

    def is_safe_to_update_operator_group_annotations(self) -> bool:
        return self.status.reason in _SAFE_TO_ANNOTATE_OPERATOR_GROUP_REASONS

    def trim_conditions_if_limit_exceeded(self) -> None:
        """Drop the oldest conditions beyond the length limit."""
        if len(self.status.conditions) > CONDITIONS_LENGTH_LIMIT:
            self.status.conditions = self.status.conditions[-CONDITIONS_LENGTH_LIMIT:]

    def has_ca_resources(self) -> bool:
        """True if the CSV owns API services or declares webhooks."""
        return bool(self.spec.api_service_definitions.owned or self.spec.webhook_definitions)

    def owns_crd(self, name: str) -> bool:
        return any(desc.name == name for desc in self.spec.custom_resource_definitions.owned)

    def owns_api_service(self, name: str) -> bool:
        return any(
            desc.api_service_name() == name for desc in self.spec.api_service_definitions.owned
        )

    def get_all_crd_descriptions(self) -> list[CRDDescription]:
        """Owned and required CRDs by name, owned winning, in name order."""
        crds = self.spec.custom_resource_definitions
        merged = {desc.name: desc for desc in crds.required}
        merged.update((desc.name, desc) for desc in crds.owned)
        return _sorted_by_key(merged)

    def get_all_api_service_descriptions(self) -> list[APIServiceDescription]:
        """Owned and required API services, owned winning, in name order."""
        apis = self.spec.api_service_definitions
        merged = {desc.api_service_name(): desc for desc in apis.required}
        merged.update((desc.api_service_name(), desc) for desc in apis.owned)
        return _sorted_by_key(merged)

    def get_required_api_service_descriptions(self) -> list[APIServiceDescription]:
        """Required API services that are not also owned, in name order."""
        apis = self.spec.api_service_definitions
        required = {desc.api_service_name(): desc for desc in apis.required}
        for desc in apis.owned:
            required.pop(desc.api_service_name(), None)
        return _sorted_by_key(required)

    def get_owned_api_service_descriptions(self) -> list[APIServiceDescription]:
        """Owned API services, deduplicated, in name order."""
        owned = {desc.api_service_name(): desc for desc in self.spec.api_service_definitions.owned}
        return _sorted_by_key(owned)