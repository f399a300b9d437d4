"""Service instance aggregate."""

from chartbroker.domain.instance.aggregate import (
    BindingRecord,
    BindingState,
    LastOperation,
    ServiceInstance,
    binding_fields,
    binding_state_fields,
    release_fields,
    remove_binding_fields,
)
from chartbroker.domain.instance.value_objects import OperationState, OperationType

__all__ = [
    "BindingRecord",
    "BindingState",
    "LastOperation",
    "OperationState",
    "OperationType",
    "ServiceInstance",
    "binding_fields",
    "binding_state_fields",
    "release_fields",
    "remove_binding_fields",
]
