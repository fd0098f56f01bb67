"""Spec-side types of a ClusterServiceVersion: install strategy, APIs and webhooks."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from olmapi.meta import V1ALPHA1_GROUP_VERSION, GroupVersionKind, LabelSelector

CLUSTER_SERVICE_VERSION_API_VERSION = str(V1ALPHA1_GROUP_VERSION)
CLUSTER_SERVICE_VERSION_KIND = "ClusterServiceVersion"
OPERATOR_GROUP_NAMESPACE_ANNOTATION_KEY = "olm.operatorNamespace"
INSTALL_STRATEGY_NAME_DEPLOYMENT = "deployment"
SKIP_RANGE_ANNOTATION_KEY = "olm.skipRange"


class InstallModeType(str, Enum):
    """A kind of namespace selection an operator can be installed into."""

    OWN_NAMESPACE = "OwnNamespace"
    SINGLE_NAMESPACE = "SingleNamespace"
    MULTI_NAMESPACE = "MultiNamespace"
    ALL_NAMESPACES = "AllNamespaces"

    def __str__(self) -> str:
        return self.value


@dataclass
class InstallMode:
    """Whether the operator supports one install mode type."""

    type: InstallModeType
    supported: bool


@dataclass
class StrategyDeploymentPermissions:
    """RBAC rules and the service account used by the install strategy."""

    service_account_name: str
    rules: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class StrategyDeploymentSpec:
    """Name, spec and labels of a deployment to create."""

    name: str
    spec: dict[str, Any] = field(default_factory=dict)
    label: dict[str, str] = field(default_factory=dict)


@dataclass
class StrategyDetailsDeployment:
    """Parsed details of a deployment install strategy."""

    deployment_specs: list[StrategyDeploymentSpec] = field(default_factory=list)
    permissions: list[StrategyDeploymentPermissions] = field(default_factory=list)
    cluster_permissions: list[StrategyDeploymentPermissions] = field(default_factory=list)

    @property
    def strategy_name(self) -> str:
        return INSTALL_STRATEGY_NAME_DEPLOYMENT


@dataclass
class NamedInstallStrategy:
    strategy_name: str
    strategy_spec: StrategyDetailsDeployment = field(default_factory=StrategyDetailsDeployment)


@dataclass
class StatusDescriptor:
    """Describes a field in the status block of a custom resource."""

    path: str
    display_name: str = ""
    description: str = ""
    x_descriptors: list[str] = field(default_factory=list)
    value: Any = None


@dataclass
class SpecDescriptor:
    """Describes a field in the spec block of a custom resource."""

    path: str
    display_name: str = ""
    description: str = ""
    x_descriptors: list[str] = field(default_factory=list)
    value: Any = None


@dataclass
class ActionDescriptor:
    """Describes an action that can be performed on a custom resource."""

    path: str
    display_name: str = ""
    description: str = ""
    x_descriptors: list[str] = field(default_factory=list)
    value: Any = None


@dataclass
class APIResourceReference:
    """A resource type used by a custom resource."""

    name: str
    kind: str
    version: str


@dataclass
class CRDDescription:
    """Details about a custom resource definition."""

    name: str
    version: str = ""
    kind: str = ""
    display_name: str = ""
    description: str = ""
    resources: list[APIResourceReference] = field(default_factory=list)
    status_descriptors: list[StatusDescriptor] = field(default_factory=list)
    spec_descriptors: list[SpecDescriptor] = field(default_factory=list)
    action_descriptors: list[ActionDescriptor] = field(default_factory=list)


@dataclass
class APIServiceDescription:
    """Details about an API provided through aggregation."""

    name: str
    group: str
    version: str
    kind: str
    deployment_name: str = ""
    container_port: int = 0
    display_name: str = ""
    description: str = ""
    resources: list[APIResourceReference] = field(default_factory=list)
    status_descriptors: list[StatusDescriptor] = field(default_factory=list)
    spec_descriptors: list[SpecDescriptor] = field(default_factory=list)
    action_descriptors: list[ActionDescriptor] = field(default_factory=list)

    def api_service_name(self) -> str:
        """The APIService name derived from version and group."""
        return f"{self.version}.{self.group}"


class WebhookAdmissionType(str, Enum):
    VALIDATING_ADMISSION_WEBHOOK = "ValidatingAdmissionWebhook"
    MUTATING_ADMISSION_WEBHOOK = "MutatingAdmissionWebhook"
    CONVERSION_WEBHOOK = "ConversionWebhook"

    def __str__(self) -> str:
        return self.value


@dataclass
class ServiceReference:
    name: str
    namespace: str
    path: str | None = None
    port: int | None = None


@dataclass
class WebhookClientConfig:
    service: ServiceReference | None = None
    ca_bundle: bytes | None = None


@dataclass
class ValidatingWebhook:
    name: str
    client_config: WebhookClientConfig
    rules: list[dict[str, Any]] = field(default_factory=list)
    failure_policy: str | None = None
    match_policy: str | None = None
    namespace_selector: LabelSelector | None = None
    object_selector: LabelSelector | None = None
    side_effects: str | None = None
    timeout_seconds: int | None = None
    admission_review_versions: list[str] = field(default_factory=list)


@dataclass
class MutatingWebhook:
    name: str
    client_config: WebhookClientConfig
    rules: list[dict[str, Any]] = field(default_factory=list)
    failure_policy: str | None = None
    match_policy: str | None = None
    namespace_selector: LabelSelector | None = None
    object_selector: LabelSelector | None = None
    side_effects: str | None = None
    timeout_seconds: int | None = None
    admission_review_versions: list[str] = field(default_factory=list)
    reinvocation_policy: str | None = None


@dataclass
class WebhookDescription:
    """Details about a webhook the operator requires."""

    generate_name: str
    type: WebhookAdmissionType
    deployment_name: str = ""
    container_port: int = 443
    target_port: int | str | None = None
    rules: list[dict[str, Any]] = field(default_factory=list)
    failure_policy: str | None = None
    match_policy: str | None = None
    object_selector: LabelSelector | None = None
    side_effects: str | None = None
    timeout_seconds: int | None = None
    admission_review_versions: list[str] = field(default_factory=list)
    reinvocation_policy: str | None = None
    webhook_path: str | None = None
    conversion_crds: list[str] = field(default_factory=list)

    def _client_config(self, namespace: str, ca_bundle: bytes | None) -> WebhookClientConfig:
        return WebhookClientConfig(
            service=ServiceReference(
                name=self.domain_name() + "-service",
                namespace=namespace,
                path=self.webhook_path,
                port=self.container_port,
            ),
            ca_bundle=ca_bundle,
        )

    def get_validating_webhook(
        self,
        namespace: str,
        namespace_selector: LabelSelector | None,
        ca_bundle: bytes | None,
    ) -> ValidatingWebhook:
        """Build a validating webhook from this description."""
        return ValidatingWebhook(
            name=self.generate_name,
            client_config=self._client_config(namespace, ca_bundle),
            rules=self.rules,
            failure_policy=self.failure_policy,
            match_policy=self.match_policy,
            namespace_selector=namespace_selector,
            object_selector=self.object_selector,
            side_effects=self.side_effects,
            timeout_seconds=self.timeout_seconds,
            admission_review_versions=self.admission_review_versions,
        )

    def get_mutating_webhook(
        self,
        namespace: str,
        namespace_selector: LabelSelector | None,
        ca_bundle: bytes | None,
    ) -> MutatingWebhook:
        """Build a mutating webhook from this description."""
        return MutatingWebhook(
            name=self.generate_name,
            client_config=self._client_config(namespace, ca_bundle),
            rules=self.rules,
            failure_policy=self.failure_policy,
            match_policy=self.match_policy,
            namespace_selector=namespace_selector,
            object_selector=self.object_selector,
            side_effects=self.side_effects,
            timeout_seconds=self.timeout_seconds,
            admission_review_versions=self.admission_review_versions,
            reinvocation_policy=self.reinvocation_policy,
        )

    def domain_name(self) -> str:
        """The deployment name with every period replaced by a hyphen."""
        return self.deployment_name.replace(".", "-")


@dataclass
class CustomResourceDefinitions:
    """CRDs owned or required by an operator."""

    owned: list[CRDDescription] = field(default_factory=list)
    required: list[CRDDescription] = field(default_factory=list)


@dataclass
class APIServiceDefinitions:
    """Aggregated APIs owned or required by an operator."""

    owned: list[APIServiceDescription] = field(default_factory=list)
    required: list[APIServiceDescription] = field(default_factory=list)


@dataclass
class CleanupSpec:
    enabled: bool = False


@dataclass
class Maintainer:
    name: str = ""
    email: str = ""


@dataclass
class AppLink:
    name: str = ""
    url: str = ""


@dataclass
class Icon:
    data: str = ""
    media_type: str = ""


@dataclass
class RelatedImage:
    name: str
    image: str


@dataclass
class ClusterServiceVersionSpec:
    """How to install an operator that manages apps for a given version."""

    install_strategy: NamedInstallStrategy = field(
        default_factory=lambda: NamedInstallStrategy(INSTALL_STRATEGY_NAME_DEPLOYMENT)
    )
    version: str = ""
    maturity: str = ""
    custom_resource_definitions: CustomResourceDefinitions = field(
        default_factory=CustomResourceDefinitions
    )
    api_service_definitions: APIServiceDefinitions = field(default_factory=APIServiceDefinitions)
    webhook_definitions: list[WebhookDescription] = field(default_factory=list)
    native_apis: list[GroupVersionKind] = field(default_factory=list)
    min_kube_version: str = ""
    display_name: str = ""
    description: str = ""
    keywords: list[str] = field(default_factory=list)
    maintainers: list[Maintainer] = field(default_factory=list)
    provider: AppLink = field(default_factory=AppLink)
    links: list[AppLink] = field(default_factory=list)
    icon: list[Icon] = field(default_factory=list)
    install_modes: list[InstallMode] = field(default_factory=list)
    replaces: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    selector: LabelSelector | None = None
    cleanup: CleanupSpec = field(default_factory=CleanupSpec)
    skips: list[str] = field(default_factory=list)
    related_images: list[RelatedImage] = field(default_factory=list)