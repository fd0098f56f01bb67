from olmapi.meta import Condition, ConditionStatus, ObjectReference
from olmapi.operatorgroup import (
    UPGRADEABLE,
    OperatorCondition,
    OperatorConditionSpec,
    OperatorGroup,
    OperatorGroupSpec,
    OperatorGroupStatus,
)


def test_build_target_namespaces_sorts_and_joins():
    group = OperatorGroup(status=OperatorGroupStatus(namespaces=["zeta", "alpha", "mid"]))
    result = group.build_target_namespaces()
    assert result == ",".join(sorted(["zeta", "alpha", "mid"]))
    assert group.status.namespaces == sorted(["zeta", "alpha", "mid"])


def test_build_target_namespaces_empty_and_all():
    assert OperatorGroup().build_target_namespaces() == ""
    group = OperatorGroup(status=OperatorGroupStatus(namespaces=[""]))
    assert group.build_target_namespaces() == ""


def test_service_account_specified():
    assert not OperatorGroup().is_service_account_specified()
    group = OperatorGroup(spec=OperatorGroupSpec(service_account_name="sa"))
    assert group.is_service_account_specified()


def test_service_account_synced():
    group = OperatorGroup(spec=OperatorGroupSpec(service_account_name="sa"))
    assert not group.has_service_account_synced()
    group.status.service_account_ref = ObjectReference(name="sa")
    assert group.has_service_account_synced()
    unnamed = OperatorGroup(status=OperatorGroupStatus(service_account_ref=ObjectReference(name="sa")))
    assert not unnamed.has_service_account_synced()


def test_default_api_versions():
    assert OperatorGroup().api_version == "operators.coreos.com/v1alpha2"
    assert OperatorCondition().api_version == "operators.coreos.com/v2"


def test_operator_condition_holds_conditions():
    cond = Condition(type=UPGRADEABLE, status=ConditionStatus.FALSE, reason="busy")
    oc = OperatorCondition(spec=OperatorConditionSpec(deployments=["d"], conditions=[cond]))
    assert oc.spec.conditions[0].type == "Upgradeable"
    assert oc.spec.conditions[0].status == ConditionStatus.FALSE
    assert oc.status.conditions == []