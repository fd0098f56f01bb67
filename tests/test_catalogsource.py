from datetime import datetime, timedelta, timezone

import pytest

from olmapi.catalogsource import (
    CATALOG_SOURCE_REGISTRY_SERVER_ERROR,
    DEFAULT_REGISTRY_POLL_DURATION,
    CatalogSource,
    CatalogSourceSpec,
    CatalogSourceStatus,
    ConfigMapResourceReference,
    RegistryPoll,
    RegistryServiceStatus,
    SourceType,
    UpdateStrategy,
)
from olmapi.meta import ObjectMeta


def _polling_source(interval, created=None, latest=None):
    return CatalogSource(
        metadata=ObjectMeta(creation_timestamp=created),
        spec=CatalogSourceSpec(
            update_strategy=UpdateStrategy(RegistryPoll(interval=interval)),
            image="mycatsrcimage",
            source_type=SourceType.GRPC,
        ),
        status=CatalogSourceStatus(latest_image_registry_poll=latest),
    )


def test_update_first_time_after_creation_plus_interval():
    created = datetime.now(timezone.utc) - timedelta(seconds=2)
    source = _polling_source(timedelta(seconds=1), created=created)
    assert source.update() is True


def test_update_based_on_previous_poll_timestamp():
    past = datetime.now(timezone.utc) - timedelta(seconds=2)
    source = _polling_source(timedelta(seconds=1), created=past, latest=past)
    assert source.update() is True


def test_update_not_yet_due():
    now = datetime.now(timezone.utc)
    source = _polling_source(timedelta(hours=1), created=now, latest=now)
    assert source.update() is False


def test_update_without_polling_is_false():
    assert CatalogSource().update() is False


def test_poll_without_strategy():
    assert CatalogSource().poll() is False


def test_poll_not_image_based():
    source = CatalogSource(
        spec=CatalogSourceSpec(source_type=SourceType.INTERNAL, address="127.0.0.1:8080")
    )
    assert source.poll() is False


def test_poll_image_based_grpc():
    source = _polling_source(timedelta(seconds=1))
    assert source.poll() is True


def test_poll_image_but_not_grpc():
    source = _polling_source(timedelta(seconds=1))
    source.spec.source_type = SourceType.CONFIGMAP
    assert source.poll() is False


def test_update_strategy_valid():
    strategy = UpdateStrategy.from_dict({"registryPoll": {"interval": "45m"}})
    assert strategy.registry_poll.raw_interval == "45m"
    assert strategy.registry_poll.interval == timedelta(minutes=45)
    assert strategy.registry_poll.parsing_error == ""


def test_update_strategy_invalid():
    strategy = UpdateStrategy.from_dict({"registryPoll": {"interval": "19mError Code"}})
    assert strategy.registry_poll.raw_interval == "19mError Code"
    assert strategy.registry_poll.interval == timedelta(minutes=15)
    assert strategy.registry_poll.parsing_error == (
        "error parsing spec.updateStrategy.registryPoll.interval. Using the default value "
        'of 15m0s instead. Error: time: unknown unit "mError Code" in duration "19mError Code"'
    )


def test_update_strategy_empty():
    strategy = UpdateStrategy.from_dict({"registryPoll": {"interval": ""}})
    assert strategy.registry_poll.raw_interval == ""
    assert strategy.registry_poll.interval == DEFAULT_REGISTRY_POLL_DURATION
    assert strategy.registry_poll.parsing_error == (
        "error parsing spec.updateStrategy.registryPoll.interval. Using the default value "
        'of 15m0s instead. Error: time: invalid duration ""'
    )


def test_update_strategy_missing_registry_poll():
    with pytest.raises(ValueError):
        UpdateStrategy.from_dict({})


def test_registry_service_address():
    status = RegistryServiceStatus(service_name="svc", service_namespace="ns", port="50051")
    assert status.address() == "svc.ns.svc:50051"


def test_catalog_source_address_prefers_spec():
    source = CatalogSource(
        spec=CatalogSourceSpec(address="host:1"),
        status=CatalogSourceStatus(
            registry_service_status=RegistryServiceStatus(service_name="a", service_namespace="b", port="2")
        ),
    )
    assert source.address() == "host:1"


def test_catalog_source_address_from_service():
    source = CatalogSource(
        status=CatalogSourceStatus(
            registry_service_status=RegistryServiceStatus(service_name="a", service_namespace="b", port="2")
        )
    )
    assert source.address() == "a.b.svc:2"


def test_catalog_source_address_missing():
    with pytest.raises(ValueError):
        CatalogSource().address()


def test_set_error_with_and_without_error():
    source = CatalogSource()
    source.set_error(CATALOG_SOURCE_REGISTRY_SERVER_ERROR, RuntimeError("boom"))
    assert (source.status.reason, source.status.message) == ("RegistryServerError", "boom")
    source.set_error(CATALOG_SOURCE_REGISTRY_SERVER_ERROR, None)
    assert source.status.message == ""


def test_set_last_update_time_stops_immediate_update():
    source = _polling_source(timedelta(hours=1), created=datetime.now(timezone.utc) - timedelta(days=1))
    assert source.update() is True
    source.set_last_update_time()
    assert source.status.latest_image_registry_poll is not None
    assert source.update() is False


def test_config_map_reference_match():
    ref = ConfigMapResourceReference(name="cm", namespace="ns", uid="u1", resource_version="7")
    assert ref.is_a_match(ObjectMeta(uid="u1", resource_version="7")) is True
    assert ref.is_a_match(ObjectMeta(uid="u1", resource_version="8")) is False
    assert ref.is_a_match(ObjectMeta(uid="u2", resource_version="7")) is False