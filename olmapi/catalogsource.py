"""CatalogSource resources: repositories of operator bundles and their polling."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from olmapi.csv_types import Icon
from olmapi.meta import (
    V1ALPHA1_GROUP_VERSION,
    Condition,
    ObjectMeta,
    format_duration,
    parse_duration,
)

logger = logging.getLogger(__name__)

CATALOG_SOURCE_CRD_API_VERSION = str(V1ALPHA1_GROUP_VERSION)
CATALOG_SOURCE_KIND = "CatalogSource"
DEFAULT_REGISTRY_POLL_DURATION = timedelta(minutes=15)

# Reasons recorded on a catalog source's status.
CATALOG_SOURCE_SPEC_INVALID_ERROR = "SpecInvalidError"
CATALOG_SOURCE_CONFIG_MAP_ERROR = "ConfigMapError"
CATALOG_SOURCE_REGISTRY_SERVER_ERROR = "RegistryServerError"
CATALOG_SOURCE_INTERVAL_INVALID_ERROR = "InvalidIntervalError"


class SourceType(str, Enum):
    """The kind of backing store of a catalog source."""

    INTERNAL = "internal"
    CONFIGMAP = "configmap"
    GRPC = "grpc"

    def __str__(self) -> str:
        return self.value


class SecurityConfig(str, Enum):
    """How the catalog pod's security context is configured."""

    LEGACY = "legacy"
    RESTRICTED = "restricted"

    def __str__(self) -> str:
        return self.value


@dataclass
class GrpcPodConfig:
    """Overrides for the pod that serves a catalog."""

    node_selector: dict[str, str] = field(default_factory=dict)
    tolerations: list[dict[str, Any]] = field(default_factory=list)
    priority_class_name: str | None = None
    security_context_config: str = SecurityConfig.LEGACY


@dataclass
class RegistryPoll:
    """Polling interval for catalog images, with any error met parsing it."""

    raw_interval: str = ""
    interval: timedelta | None = None
    parsing_error: str = ""


@dataclass
class UpdateStrategy:
    """How updated catalog images are discovered."""

    registry_poll: RegistryPoll | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UpdateStrategy:
        """Read an update strategy, falling back to the default interval on bad input."""
        poll_data = data.get("registryPoll")
        if poll_data is None:
            raise ValueError("updateStrategy has no registryPoll")
        poll = RegistryPoll(raw_interval=poll_data.get("interval", "") or "")
        try:
            poll.interval = parse_duration(poll.raw_interval)
        except ValueError as err:
            poll.parsing_error = (
                "error parsing spec.updateStrategy.registryPoll.interval. "
                f"Using the default value of {format_duration(DEFAULT_REGISTRY_POLL_DURATION)}"
                f" instead. Error: {err}"
            )
            poll.interval = DEFAULT_REGISTRY_POLL_DURATION
        return cls(registry_poll=poll)


@dataclass
class CatalogSourceSpec:
    """Where a catalog's content comes from and how it is presented."""

    source_type: str = ""
    priority: int = 0
    config_map: str = ""
    address: str = ""
    image: str = ""
    grpc_pod_config: GrpcPodConfig | None = None
    update_strategy: UpdateStrategy | None = None
    secrets: list[str] = field(default_factory=list)
    display_name: str = ""
    description: str = ""
    publisher: str = ""
    icon: Icon = field(default_factory=Icon)


@dataclass
class RegistryServiceStatus:
    """The service through which a registry is reached."""

    protocol: str = ""
    service_name: str = ""
    service_namespace: str = ""
    port: str = ""
    created_at: datetime | None = None

    def address(self) -> str:
        return f"{self.service_name}.{self.service_namespace}.svc:{self.port}"


@dataclass
class GRPCConnectionState:
    address: str = ""
    last_observed_state: str = ""
    last_connect_time: datetime | None = None


@dataclass
class ConfigMapResourceReference:
    """The config map a catalog was extracted from."""

    name: str
    namespace: str
    uid: str = ""
    resource_version: str = ""
    last_update_time: datetime | None = None

    def is_a_match(self, obj: ObjectMeta) -> bool:
        """True if the object has the same UID and resource version."""
        return self.uid == obj.uid and self.resource_version == obj.resource_version


@dataclass
class CatalogSourceStatus:
    message: str = ""
    reason: str = ""
    latest_image_registry_poll: datetime | None = None
    config_map_resource: ConfigMapResourceReference | None = None
    registry_service_status: RegistryServiceStatus | None = None
    grpc_connection_state: GRPCConnectionState | None = None
    conditions: list[Condition] = field(default_factory=list)


def _now_like(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return datetime.now()
    return datetime.now(moment.tzinfo)


@dataclass
class CatalogSource:
    """A repository of CSVs, CRDs and operator packages."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: CatalogSourceSpec = field(default_factory=CatalogSourceSpec)
    status: CatalogSourceStatus = field(default_factory=CatalogSourceStatus)
    api_version: str = CATALOG_SOURCE_CRD_API_VERSION
    kind: str = CATALOG_SOURCE_KIND

    def address(self) -> str:
        """The spec address, or else the address of the registry service."""
        if self.spec.address:
            return self.spec.address
        if self.status.registry_service_status is None:
            raise ValueError("catalog source has neither an address nor a registry service")
        return self.status.registry_service_status.address()

    def set_error(self, reason: str, err: BaseException | None) -> None:
        self.status.reason = reason
        self.status.message = str(err) if err is not None else ""

    def set_last_update_time(self) -> None:
        self.status.latest_image_registry_poll = datetime.now(timezone.utc)

    def update(self) -> bool:
        """True if polling is on and the poll interval has elapsed."""
        if not self.poll():
            return False
        poll = self.spec.update_strategy.registry_poll
        if poll.interval is None:
            raise ValueError("registry poll has no interval")
        interval = poll.interval
        name = self.metadata.name
        latest = self.status.latest_image_registry_poll
        logger.debug("CatalogSource %s: latest poll %s", name, latest)

        if latest is None:
            created = self.metadata.creation_timestamp
            if created is None:
                return True
            due = created + interval < _now_like(created)
            logger.debug("CatalogSource %s: creation timestamp plus interval before now %s", name, due)
            return due
        due = latest + interval < _now_like(latest)
        logger.debug("CatalogSource %s: latest poll plus interval before now %s", name, due)
        return due

    def poll(self) -> bool:
        """True if polling is enabled for this catalog source."""
        strategy = self.spec.update_strategy
        if strategy is None or strategy.registry_poll is None:
            return False
        if not self.spec.image:
            return False
        return self.spec.source_type == SourceType.GRPC