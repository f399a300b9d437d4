"""ServiceInstance aggregate and its flat record mapping."""

import json
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from chartbroker.domain.instance.value_objects import (
    BINDING_KEY_PREFIX,
    BINDING_STATE_KEY_PREFIX,
    OPERATION_DESCRIPTION_KEY,
    OPERATION_NAME_KEY,
    OPERATION_STATE_KEY,
    PLAN_ID_KEY,
    PROVISION_PARAMS_KEY,
    RELEASE_NAME_KEY,
    RELEASE_NAMESPACE_KEY,
    SERVICE_ID_KEY,
    OperationState,
    binding_key,
    binding_state_key,
)
from chartbroker.domain.params import ProvisionParams


class LastOperation(BaseModel):
    """Name, state and description of an instance's current operation epoch."""

    model_config = ConfigDict(frozen=True)

    name: str
    state: OperationState
    description: str = ""

    def to_fields(self) -> dict[str, str]:
        return {
            OPERATION_NAME_KEY: self.name,
            OPERATION_STATE_KEY: self.state.value,
            OPERATION_DESCRIPTION_KEY: self.description,
        }


class BindingState(BaseModel):
    """Operation state of a single binding."""

    model_config = ConfigDict(frozen=True)

    state: OperationState
    description: str = ""

    def to_json(self) -> str:
        body: dict[str, Any] = {"state": self.state.value}
        if self.description:
            body["description"] = self.description
        return json.dumps(body, sort_keys=True)

    @classmethod
    def from_json(cls, raw: str) -> "BindingState":
        data = json.loads(raw)
        return cls(state=OperationState(data["state"]), description=data.get("description") or "")


class BindingRecord(BaseModel):
    """Binding sub-record: stored credential payload plus its operation state."""

    model_config = ConfigDict(frozen=True)

    binding_id: str
    credentials: Optional[dict[str, Any]] = None
    parameters: dict[str, Any] = Field(default_factory=dict)
    state: Optional[BindingState] = None

    @property
    def has_payload(self) -> bool:
        return self.credentials is not None

    def payload(self) -> dict[str, Any]:
        """The OSB GetBinding response body."""
        return {"credentials": dict(self.credentials or {}), "parameters": dict(self.parameters)}


class ServiceInstance(BaseModel):
    """A provisioned (or provisioning) service instance."""

    model_config = ConfigDict(frozen=True)

    instance_id: str
    service_id: str
    plan_id: str
    provision_params: dict[str, Any] = Field(default_factory=dict)
    release_name: str = ""
    release_namespace: str = ""
    last_operation: Optional[LastOperation] = None
    bindings: dict[str, BindingRecord] = Field(default_factory=dict)

    @property
    def params(self) -> ProvisionParams:
        return ProvisionParams(self.provision_params)

    def binding(self, binding_id: str) -> Optional[BindingRecord]:
        return self.bindings.get(binding_id)

    def to_record(self) -> dict[str, str]:
        """Serialize to the flat string map persisted by the record store."""
        record: dict[str, str] = {
            SERVICE_ID_KEY: self.service_id,
            PLAN_ID_KEY: self.plan_id,
            PROVISION_PARAMS_KEY: json.dumps(self.provision_params, sort_keys=True),
        }
        if self.release_name:
            record[RELEASE_NAME_KEY] = self.release_name
        if self.release_namespace:
            record[RELEASE_NAMESPACE_KEY] = self.release_namespace
        if self.last_operation is not None:
            record.update(self.last_operation.to_fields())
        for binding in self.bindings.values():
            if binding.has_payload:
                record.update(binding_fields(binding.binding_id, binding.payload()))
            if binding.state is not None:
                record.update(binding_state_fields(binding.binding_id, binding.state))
        return record

    @classmethod
    def from_record(cls, instance_id: str, fields: dict[str, str]) -> "ServiceInstance":
        last_operation = None
        if fields.get(OPERATION_NAME_KEY) is not None and fields.get(OPERATION_STATE_KEY):
            last_operation = LastOperation(
                name=fields[OPERATION_NAME_KEY],
                state=OperationState(fields[OPERATION_STATE_KEY]),
                description=fields.get(OPERATION_DESCRIPTION_KEY, ""),
            )

        bindings: dict[str, dict[str, Any]] = {}
        for key, raw in fields.items():
            if key.startswith(BINDING_KEY_PREFIX):
                binding_id = key[len(BINDING_KEY_PREFIX):]
                payload = json.loads(raw)
                entry = bindings.setdefault(binding_id, {"binding_id": binding_id})
                entry["credentials"] = payload.get("credentials") or {}
                entry["parameters"] = payload.get("parameters") or {}
            elif key.startswith(BINDING_STATE_KEY_PREFIX):
                binding_id = key[len(BINDING_STATE_KEY_PREFIX):]
                entry = bindings.setdefault(binding_id, {"binding_id": binding_id})
                entry["state"] = BindingState.from_json(raw)

        raw_params = fields.get(PROVISION_PARAMS_KEY) or "{}"
        return cls(
            instance_id=instance_id,
            service_id=fields.get(SERVICE_ID_KEY, ""),
            plan_id=fields.get(PLAN_ID_KEY, ""),
            provision_params=json.loads(raw_params),
            release_name=fields.get(RELEASE_NAME_KEY, ""),
            release_namespace=fields.get(RELEASE_NAMESPACE_KEY, ""),
            last_operation=last_operation,
            bindings={binding_id: BindingRecord(**entry) for binding_id, entry in bindings.items()},
        )


def release_fields(release_name: str, release_namespace: str) -> dict[str, str]:
    return {RELEASE_NAME_KEY: release_name, RELEASE_NAMESPACE_KEY: release_namespace}


def binding_fields(binding_id: str, payload: dict[str, Any]) -> dict[str, str]:
    return {binding_key(binding_id): json.dumps(payload, sort_keys=True)}


def binding_state_fields(binding_id: str, state: BindingState) -> dict[str, str]:
    return {binding_state_key(binding_id): state.to_json()}


def remove_binding_fields(binding_id: str) -> dict[str, Optional[str]]:
    return {binding_key(binding_id): None, binding_state_key(binding_id): None}
