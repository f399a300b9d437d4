"""Tests for the service instance aggregate and its record mapping."""

import json

import pytest

from chartbroker.domain.instance.aggregate import (
    BindingRecord,
    BindingState,
    LastOperation,
    ServiceInstance,
    binding_state_fields,
    remove_binding_fields,
)
from chartbroker.domain.instance.value_objects import OperationState, OperationType


@pytest.mark.unit
class TestServiceInstanceRecord:
    """Test mapping between ServiceInstance and the flat record."""

    def test_record_uses_wire_field_names(self):
        """Test that persisted keys and state values match what other brokers read."""
        instance = ServiceInstance(
            instance_id="i1",
            service_id="redis",
            plan_id="5-0-7",
            provision_params={"cluster": {"enabled": False}},
            release_name="redis-0001",
            release_namespace="ns",
            last_operation=LastOperation(name="provision-abc", state=OperationState.IN_PROGRESS, description="x"),
        )

        record = instance.to_record()

        assert record == {
            "serviceId": "redis",
            "planId": "5-0-7",
            "provisionParams": json.dumps({"cluster": {"enabled": False}}),
            "releaseName": "redis-0001",
            "releaseNamespace": "ns",
            "lastOperationName": "provision-abc",
            "lastOperationState": "in progress",
            "lastOperationDescription": "x",
        }

    def test_from_record_restores_bindings(self):
        fields = {
            "serviceId": "mysql",
            "planId": "mysql-5-7-30",
            "provisionParams": "{}",
            "lastOperationName": "provision-abc",
            "lastOperationState": "succeeded",
            "lastOperationDescription": "",
            "binding-b1": json.dumps({"credentials": {"password": "pw"}, "parameters": {"k": "v"}}),
            "bindingState-b1": json.dumps({"state": "succeeded"}),
            "bindingState-b2": json.dumps({"state": "in progress", "description": "binding"}),
        }

        instance = ServiceInstance.from_record("i1", fields)

        assert instance.last_operation.state is OperationState.SUCCEEDED
        b1 = instance.binding("b1")
        assert b1.has_payload
        assert b1.payload() == {"credentials": {"password": "pw"}, "parameters": {"k": "v"}}
        assert b1.state.state is OperationState.SUCCEEDED
        b2 = instance.binding("b2")
        assert not b2.has_payload
        assert b2.state == BindingState(state=OperationState.IN_PROGRESS, description="binding")
        assert instance.binding("b3") is None

    def test_record_without_operation_has_no_last_operation(self):
        instance = ServiceInstance.from_record("i1", {"serviceId": "redis", "planId": "p"})

        assert instance.last_operation is None
        assert instance.provision_params == {}
        assert instance.release_name == ""

    def test_round_trip_with_binding(self):
        instance = ServiceInstance(
            instance_id="i1",
            service_id="redis",
            plan_id="p",
            bindings={
                "b1": BindingRecord(
                    binding_id="b1",
                    credentials={"uri": "redis://:pw@h:6379"},
                    state=BindingState(state=OperationState.SUCCEEDED),
                )
            },
        )

        assert ServiceInstance.from_record("i1", instance.to_record()) == instance

    def test_binding_state_json_omits_empty_description(self):
        assert json.loads(BindingState(state=OperationState.FAILED).to_json()) == {"state": "failed"}
        fields = binding_state_fields("b1", BindingState(state=OperationState.FAILED, description="boom"))
        assert json.loads(fields["bindingState-b1"]) == {"state": "failed", "description": "boom"}

    def test_remove_binding_fields_clears_both_keys(self):
        assert remove_binding_fields("b1") == {"binding-b1": None, "bindingState-b1": None}


@pytest.mark.unit
class TestOperationValues:
    def test_terminal_states(self):
        assert not OperationState.IN_PROGRESS.is_terminal
        assert OperationState.SUCCEEDED.is_terminal
        assert OperationState.FAILED.is_terminal

    def test_token_prefixes(self):
        assert [t.token_prefix for t in OperationType] == ["provision-", "deprovision-", "bind-"]
