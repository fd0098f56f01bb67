import pytest

from olmapi.installplan import Approval
from olmapi.meta import ConditionStatus, ObjectReference
from olmapi.subscription import (
    Subscription,
    SubscriptionCatalogHealth,
    SubscriptionCondition,
    SubscriptionConditionType,
    SubscriptionSpec,
    SubscriptionState,
    SubscriptionStatus,
    new_install_plan_reference,
)


def _spec(approval=""):
    return SubscriptionSpec(
        catalog_source="catalog",
        catalog_source_namespace="olm",
        package="pkg",
        install_plan_approval=approval,
    )


@pytest.mark.parametrize(
    "text, member",
    [
        ("AtLatestKnown", SubscriptionState.AT_LATEST),
        ("UpgradePending", SubscriptionState.UPGRADE_PENDING),
    ],
)
def test_state_values(text, member):
    assert SubscriptionState(text) is member
    assert str(SubscriptionState(text)) == text


def test_condition_equals_ignores_times():
    a = SubscriptionCondition("A", ConditionStatus.TRUE, "r", "m", last_heartbeat_time=None)
    b = SubscriptionCondition("A", ConditionStatus.TRUE, "r", "m")
    b.last_transition_time = a.last_transition_time
    assert a.equals(b)
    c = SubscriptionCondition("A", ConditionStatus.TRUE, "r", "other")
    assert not a.equals(c)


def test_get_condition_missing_is_unknown():
    status = SubscriptionStatus()
    cond = status.get_condition(SubscriptionConditionType.RESOLUTION_FAILED)
    assert cond.type == SubscriptionConditionType.RESOLUTION_FAILED
    assert cond.status == ConditionStatus.UNKNOWN


def test_set_condition_replaces_and_appends():
    status = SubscriptionStatus()
    first = SubscriptionCondition(SubscriptionConditionType.INSTALL_PLAN_PENDING, ConditionStatus.TRUE)
    status.set_condition(first)
    updated = SubscriptionCondition(
        SubscriptionConditionType.INSTALL_PLAN_PENDING, ConditionStatus.FALSE, reason="done"
    )
    status.set_condition(updated)
    assert status.conditions == [updated]
    other = SubscriptionCondition(SubscriptionConditionType.INSTALL_PLAN_FAILED, ConditionStatus.TRUE)
    status.set_condition(other)
    assert status.conditions == [updated, other]
    assert status.get_condition(SubscriptionConditionType.INSTALL_PLAN_FAILED) is other


def test_remove_conditions():
    status = SubscriptionStatus()
    kinds = [
        SubscriptionConditionType.CATALOG_SOURCES_UNHEALTHY,
        SubscriptionConditionType.INSTALL_PLAN_MISSING,
        SubscriptionConditionType.INSTALL_PLAN_FAILED,
    ]
    for k in kinds:
        status.set_condition(SubscriptionCondition(k, ConditionStatus.TRUE))
    status.remove_conditions(
        SubscriptionConditionType.INSTALL_PLAN_MISSING,
        SubscriptionConditionType.INSTALL_PLAN_FAILED,
    )
    assert [c.type for c in status.conditions] == [kinds[0]]
    status.remove_conditions(kinds[0])
    assert status.conditions == []


def test_catalog_health_equals():
    a = SubscriptionCatalogHealth(ObjectReference(name="x", uid="u1"), None, True)
    b = SubscriptionCatalogHealth(ObjectReference(name="y", uid="u1"), None, True)
    c = SubscriptionCatalogHealth(ObjectReference(uid="u2"), None, True)
    d = SubscriptionCatalogHealth(ObjectReference(uid="u1"), None, False)
    assert a.equals(b)
    assert not a.equals(c)
    assert not a.equals(d)


def test_catalog_health_equals_without_ref_raises():
    a = SubscriptionCatalogHealth(None, None, True)
    with pytest.raises(ValueError):
        a.equals(a)


@pytest.mark.parametrize(
    "approval, expected",
    [
        ("", Approval.AUTOMATIC),
        (Approval.AUTOMATIC, Approval.AUTOMATIC),
        (Approval.MANUAL, Approval.MANUAL),
        ("Manual", Approval.MANUAL),
        ("bogus", Approval.AUTOMATIC),
    ],
)
def test_get_install_plan_approval(approval, expected):
    sub = Subscription(spec=_spec(approval))
    assert sub.get_install_plan_approval() == expected


def test_get_install_plan_approval_without_spec():
    with pytest.raises(ValueError):
        Subscription().get_install_plan_approval()


def test_new_install_plan_reference():
    ref = ObjectReference(
        kind="InstallPlan", namespace="ns", name="ip", uid="uid-1", api_version="v1"
    )
    result = new_install_plan_reference(ref)
    assert result.api_version == ref.api_version
    assert result.kind == ref.kind
    assert result.name == ref.name
    assert result.uid == ref.uid