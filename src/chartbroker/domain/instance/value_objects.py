"""Instance value objects and persisted record keys."""

from enum import Enum

SERVICE_ID_KEY = "serviceId"
PLAN_ID_KEY = "planId"
PROVISION_PARAMS_KEY = "provisionParams"
RELEASE_NAME_KEY = "releaseName"
RELEASE_NAMESPACE_KEY = "releaseNamespace"
OPERATION_NAME_KEY = "lastOperationName"
OPERATION_STATE_KEY = "lastOperationState"
OPERATION_DESCRIPTION_KEY = "lastOperationDescription"
BINDING_KEY_PREFIX = "binding-"
BINDING_STATE_KEY_PREFIX = "bindingState-"

SERVICE_ID_LABEL = "service-id"
PLAN_ID_LABEL = "plan-id"


class OperationState(str, Enum):
    """OSB last-operation states."""

    IN_PROGRESS = "in progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not OperationState.IN_PROGRESS


class OperationType(str, Enum):
    """Long-running verbs and the prefix of their operation tokens."""

    PROVISION = "provision"
    DEPROVISION = "deprovision"
    BIND = "bind"

    @property
    def token_prefix(self) -> str:
        return f"{self.value}-"


def binding_key(binding_id: str) -> str:
    return f"{BINDING_KEY_PREFIX}{binding_id}"


def binding_state_key(binding_id: str) -> str:
    return f"{BINDING_STATE_KEY_PREFIX}{binding_id}"
