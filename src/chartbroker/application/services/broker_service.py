"""Broker facade: one method per OSB verb."""

from typing import Any, Optional

from chartbroker.application.dto.commands import (
    BindInstanceCommand,
    DeprovisionInstanceCommand,
    ProvisionInstanceCommand,
    UnbindInstanceCommand,
    UpdateInstanceCommand,
)
from chartbroker.application.dto.queries import (
    GetBindingQuery,
    LastBindingOperationQuery,
    LastOperationQuery,
)
from chartbroker.application.dto.responses import (
    BindingResponse,
    BindResponse,
    LastOperationResponse,
    OperationResponse,
)
from chartbroker.application.services.catalog_service import CatalogService
from chartbroker.application.services.lifecycle_manager import InstanceLifecycleManager
from chartbroker.application.services.provisioning_settings import ProvisioningSettings
from chartbroker.domain.base.exceptions import NotFoundError, UpstreamError, ValidationError
from chartbroker.domain.base.ports.logging_port import LoggingPort
from chartbroker.domain.instance.value_objects import OperationState
from chartbroker.infrastructure.adapters.logging_adapter import LoggingAdapter


class ServiceBroker:
    """Maps parsed OSB requests onto the lifecycle manager and shapes responses."""

    def __init__(
        self,
        lifecycle: InstanceLifecycleManager,
        catalog: CatalogService,
        default_namespace: str = "",
        provisioning_settings: Optional[ProvisioningSettings] = None,
        logger: Optional[LoggingPort] = None,
    ) -> None:
        self.lifecycle = lifecycle
        self._catalog = catalog
        self._default_namespace = default_namespace
        self._settings = provisioning_settings or ProvisioningSettings()
        self._logger = logger or LoggingAdapter(__name__)

    def get_catalog(self) -> dict[str, Any]:
        self._logger.debug("Getting catalog")
        return self._catalog.get_catalog().to_osb()

    def resolve_namespace(self, command: ProvisionInstanceCommand) -> str:
        namespace = command.context.get("namespace") or command.namespace or self._default_namespace
        if not isinstance(namespace, str):
            raise ValidationError(f"context namespace must be a string, got {type(namespace).__name__}")
        return namespace

    def provision(self, command: ProvisionInstanceCommand) -> OperationResponse:
        namespace = self.resolve_namespace(command)
        if not namespace:
            self._logger.info("Refusing to provision %s with empty namespace", command.instance_id)
            raise ValidationError("Cannot provision with empty namespace")

        params = command.parameters
        overrides = self._settings.override_params(command.service_id)
        if overrides is not None:
            self._logger.info("Using override parameters for service %s", command.service_id)
            params = overrides

        operation = self.lifecycle.provision(
            command.instance_id,
            command.service_id,
            command.plan_id,
            namespace,
            command.accepts_incomplete,
            params,
        )
        if command.accepts_incomplete:
            return OperationResponse(operation=operation, is_async=True)
        return OperationResponse()

    def update(self, command: UpdateInstanceCommand) -> OperationResponse:
        self._logger.info("Update of instance %s requested, nothing to change", command.instance_id)
        return OperationResponse(created=False)

    def deprovision(self, command: DeprovisionInstanceCommand) -> OperationResponse:
        operation = self.lifecycle.deprovision(command.instance_id, command.accepts_incomplete)
        if command.accepts_incomplete:
            return OperationResponse(operation=operation, is_async=True)
        return OperationResponse(created=False)

    def last_operation(self, query: LastOperationQuery) -> LastOperationResponse:
        operation = self.lifecycle.last_operation(query.instance_id, query.operation)
        return LastOperationResponse(state=operation.state, description=operation.description or None)

    def bind(self, command: BindInstanceCommand) -> BindResponse:
        existed = self._binding_exists(command.instance_id, command.binding_id)
        operation = self.lifecycle.bind(
            command.instance_id,
            command.service_id,
            command.binding_id,
            command.accepts_incomplete,
            command.parameters,
        )
        if operation:
            return BindResponse(operation=operation, is_async=True)

        state = self.lifecycle.last_binding_operation(command.instance_id, command.binding_id)
        if state.state is not OperationState.SUCCEEDED:
            raise UpstreamError(
                f"failed to bind service instance {command.instance_id!r}: {state.description or state.state.value}",
                instance_id=command.instance_id,
            )
        payload = self.lifecycle.get_binding(command.instance_id, command.binding_id)
        return BindResponse(credentials=payload["credentials"], created=not existed)

    def get_binding(self, query: GetBindingQuery) -> BindingResponse:
        return BindingResponse(**self.lifecycle.get_binding(query.instance_id, query.binding_id))

    def binding_last_operation(self, query: LastBindingOperationQuery) -> LastOperationResponse:
        state = self.lifecycle.last_binding_operation(query.instance_id, query.binding_id)
        return LastOperationResponse(state=state.state, description=state.description or None)

    def unbind(self, command: UnbindInstanceCommand) -> None:
        self.lifecycle.unbind(command.instance_id, command.binding_id)

    def _binding_exists(self, instance_id: str, binding_id: str) -> bool:
        try:
            self.lifecycle.get_binding(instance_id, binding_id)
        except NotFoundError:
            return False
        return True
