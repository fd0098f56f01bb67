from datetime import timedelta

import pytest

from olmapi import meta
from olmapi.meta import (
    GroupKind,
    GroupResource,
    GroupVersion,
    format_duration,
    parse_duration,
)


def test_group_version_string():
    assert str(meta.V1ALPHA1_GROUP_VERSION) == "operators.coreos.com/v1alpha1"
    assert str(GroupVersion("", "v1")) == "v1"


@pytest.mark.parametrize(
    "group_version, version",
    [
        (meta.V1ALPHA1_GROUP_VERSION, "v1alpha1"),
        (meta.V1ALPHA2_GROUP_VERSION, "v1alpha2"),
        (meta.V2_GROUP_VERSION, "v2"),
    ],
)
def test_group_versions_share_group(group_version, version):
    assert str(group_version) == "operators.coreos.com/" + version
    assert group_version.with_kind("Foo").version == version
    assert meta.kind("Foo", group_version) == GroupKind("operators.coreos.com", "Foo")


def test_with_kind_and_group_kind():
    gvk = meta.V2_GROUP_VERSION.with_kind("OperatorCondition")
    assert gvk.version == "v2"
    assert gvk.group_kind() == GroupKind("operators.coreos.com", "OperatorCondition")


def test_kind_defaults_to_v1alpha1_group():
    assert meta.kind("CatalogSource") == GroupKind("operators.coreos.com", "CatalogSource")


def test_resource_with_explicit_group_version():
    gv = GroupVersion("example.com", "v9")
    assert meta.resource("widgets", gv) == GroupResource("example.com", "widgets")
    assert gv.with_resource("widgets").group_resource() == GroupResource("example.com", "widgets")


def test_parse_simple_duration():
    assert parse_duration("45m") == timedelta(minutes=45)


def test_default_poll_interval_format():
    assert format_duration(timedelta(minutes=15)) == "15m0s"


def test_fraction_equals_smaller_unit():
    assert parse_duration("1.5h") == parse_duration("90m")
    assert parse_duration("0.5s") == parse_duration("500ms")


def test_signs():
    assert parse_duration("-2m") == -parse_duration("2m")
    assert parse_duration("+2m") == parse_duration("2m")
    assert parse_duration("0") == timedelta(0)


def test_micro_sign_variants_agree():
    assert parse_duration("7\u00b5s") == parse_duration("7us") == parse_duration("7\u03bcs")


@pytest.mark.parametrize(
    "value",
    [
        timedelta(hours=1, minutes=30, seconds=5, milliseconds=250),
        timedelta(microseconds=7),
        timedelta(milliseconds=3, microseconds=400),
        timedelta(days=2, seconds=1),
        -timedelta(minutes=3, seconds=2),
        timedelta(0),
    ],
)
def test_format_parse_round_trip(value):
    assert parse_duration(format_duration(value)) == value


def test_unknown_unit_message():
    with pytest.raises(ValueError) as info:
        parse_duration("19mError Code")
    assert str(info.value) == 'time: unknown unit "mError Code" in duration "19mError Code"'


def test_empty_duration_message():
    with pytest.raises(ValueError) as info:
        parse_duration("")
    assert str(info.value) == 'time: invalid duration ""'


@pytest.mark.parametrize("text", ["-", "10", "abc", ".s", "1h1", "99999999999999999999h"])
def test_invalid_durations(text):
    with pytest.raises(ValueError):
        parse_duration(text)


def test_object_meta_defaults_are_independent():
    first = meta.ObjectMeta()
    second = meta.ObjectMeta()
    first.labels["a"] = "b"
    assert second.labels == {}
    assert first.creation_timestamp is None