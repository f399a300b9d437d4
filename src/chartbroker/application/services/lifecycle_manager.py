"""Instance and binding lifecycle.

Turns each broker verb into a deployment action, a durable operation record
and, for bindings, a credential extraction step. Long-running verbs write an
``in progress`` operation synchronously and then either run inline or hand
the work to the task runner, which writes the terminal state back.
"""

import json
from typing import Any, Callable, Optional

from chartbroker.application.services.catalog_service import CatalogService
from chartbroker.domain.base.exceptions import (
    ConflictError,
    DomainException,
    GoneError,
    NotFoundError,
    RecordAlreadyExistsError,
    RecordNotFoundError,
    RecordStoreError,
    UpstreamError,
    ValidationError,
)
from chartbroker.domain.base.ports import (
    ChartDeployerPort,
    ChartRepositoryPort,
    ClusterPort,
    DeployedRelease,
    LoggingPort,
    RecordStorePort,
    TaskHandlePort,
    TaskRunnerPort,
)
from chartbroker.domain.catalog.models import ServicePlan
from chartbroker.domain.cluster.resources import INSTANCE_LABEL, SECRET_KIND, SERVICE_KIND
from chartbroker.domain.instance.aggregate import (
    BindingState,
    LastOperation,
    ServiceInstance,
    binding_fields,
    binding_state_fields,
    release_fields,
    remove_binding_fields,
)
from chartbroker.domain.instance.value_objects import (
    OPERATION_NAME_KEY,
    OPERATION_STATE_KEY,
    PLAN_ID_LABEL,
    SERVICE_ID_LABEL,
    OperationState,
    OperationType,
    binding_state_key,
)
from chartbroker.domain.params import BindParams, ProvisionParams
from chartbroker.infrastructure.adapters.logging_adapter import LoggingAdapter
from chartbroker.infrastructure.locking.instance_locks import InstanceLockRegistry
from chartbroker.infrastructure.utils.name_generator import NameGenerator
from chartbroker.providers.registry import ProviderRegistry

LABELED_KINDS = (SERVICE_KIND, SECRET_KIND)

# helm install --wait gives up after five minutes by default
DEFAULT_IN_FLIGHT_TIMEOUT = 360.0


def one_line(message: str) -> str:
    return " ".join(str(message).split())


def binding_task_key(instance_id: str, binding_id: str) -> str:
    return f"{instance_id}/{binding_id}"


def _checkpoint(handle: Optional[TaskHandlePort]) -> None:
    if handle is not None:
        handle.raise_if_cancelled()


class InstanceLifecycleManager:
    """Owns the lifecycle of instance records and their binding sub-records."""

    def __init__(
        self,
        store: RecordStorePort,
        catalog: CatalogService,
        charts: ChartRepositoryPort,
        deployer: ChartDeployerPort,
        cluster: ClusterPort,
        runner: TaskRunnerPort,
        providers: Optional[ProviderRegistry] = None,
        locks: Optional[InstanceLockRegistry] = None,
        names: Optional[NameGenerator] = None,
        logger: Optional[LoggingPort] = None,
        in_flight_timeout: float = DEFAULT_IN_FLIGHT_TIMEOUT,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._charts = charts
        self._deployer = deployer
        self._cluster = cluster
        self._runner = runner
        self._providers = providers or ProviderRegistry()
        self._locks = locks or InstanceLockRegistry()
        self._names = names or NameGenerator()
        self._logger = logger or LoggingAdapter(__name__)
        self._in_flight_timeout = in_flight_timeout

    # Provision

    def provision(
        self,
        instance_id: str,
        service_id: str,
        plan_id: str,
        namespace: str,
        accepts_incomplete: bool,
        params: Optional[dict[str, Any]] = None,
    ) -> str:
        """Create the instance record and deploy the plan's chart.

        Returns the operation token, or an empty string when run inline.
        """
        if not namespace:
            raise ValidationError(f"Cannot provision service instance {instance_id!r} with empty namespace")
        params = dict(params or {})
        plan = self._catalog.resolve_plan(service_id, plan_id)

        token = self._names.generate(OperationType.PROVISION.token_prefix)
        instance = ServiceInstance(
            instance_id=instance_id,
            service_id=service_id,
            plan_id=plan_id,
            provision_params=params,
            last_operation=LastOperation(
                name=token,
                state=OperationState.IN_PROGRESS,
                description=f"provisioning service instance {instance_id!r}",
            ),
        )
        with self._locks.hold(instance_id):
            try:
                self._store.create(
                    instance_id,
                    instance.to_record(),
                    labels={SERVICE_ID_LABEL: service_id, PLAN_ID_LABEL: plan.id},
                )
            except RecordAlreadyExistsError as e:
                raise ConflictError(f"service instance {instance_id!r} already exists") from e
        self._logger.info(
            "Provisioning %s (%s) as instance %s in namespace %s", plan.chart_name, plan.app_version, instance_id, namespace
        )

        def work(handle: Optional[TaskHandlePort] = None) -> None:
            self._provision_step(instance_id, plan, namespace, params, token, handle, raise_errors=handle is None)

        if accepts_incomplete:
            self._runner.submit(instance_id, work)
            return token
        work()
        return ""

    def _provision_step(
        self,
        instance_id: str,
        plan: ServicePlan,
        namespace: str,
        params: dict[str, Any],
        token: str,
        handle: Optional[TaskHandlePort],
        raise_errors: bool,
    ) -> None:
        log = self._logger.bind(instance_id=instance_id, operation=token)
        try:
            chart = self._charts.resolve_chart(plan.chart_name, plan.app_version)
            _checkpoint(handle)
            release = self._deployer.deploy(chart, namespace, params)
            self._record_release(instance_id, release, log)
            self._label_release(instance_id, release)
            _checkpoint(handle)
        except Exception as e:
            description = one_line(
                f"failed to provision service instance {instance_id!r} "
                f"(chart {plan.chart_name}@{plan.app_version}): {e}"
            )
            log.error("%s", description)
            self._finish_operation(instance_id, token, OperationState.FAILED, description)
            if raise_errors:
                self._reraise(e, description, instance_id, plan.chart_name)
            return

        self._finish_operation(
            instance_id, token, OperationState.SUCCEEDED, f"service instance {instance_id!r} provisioned"
        )
        log.info("Provisioned instance %s as release %s", instance_id, release.release_name)

    def _record_release(self, instance_id: str, release: DeployedRelease, log: LoggingPort) -> None:
        """Point the record at a new release, undeploying it if the record is gone."""
        try:
            with self._locks.hold(instance_id):
                self._store.update(instance_id, release_fields(release.release_name, release.release_namespace))
        except RecordNotFoundError:
            log.warning(
                "Record of instance %s was removed while release %s deployed, undeploying it",
                instance_id,
                release.release_name,
            )
            self._deployer.undeploy(release.release_name, release.release_namespace)
            raise

    def _label_release(self, instance_id: str, release: DeployedRelease) -> None:
        for resource in release.resources:
            if resource.kind in LABELED_KINDS:
                self._cluster.patch_label(resource, INSTANCE_LABEL, instance_id)

    # Deprovision

    def deprovision(self, instance_id: str, accepts_incomplete: bool) -> str:
        """Undeploy the instance's release and delete its record.

        An operation still running on the instance is cancelled and waited
        for, since it may be about to record a release. The record is only
        deleted once the release it names has been undeployed.
        """
        token = self._names.generate(OperationType.DEPROVISION.token_prefix)
        with self._locks.hold(instance_id):
            self._load(instance_id, GoneError)
            in_flight = self._runner.get(instance_id)
            if in_flight is not None:
                in_flight.cancel()
                self._logger.info("Cancelled in-flight operation on instance %s before deprovisioning", instance_id)
            self._store.update(
                instance_id,
                LastOperation(
                    name=token,
                    state=OperationState.IN_PROGRESS,
                    description=f"deprovisioning service instance {instance_id!r}",
                ).to_fields(),
            )

        def work(handle: Optional[TaskHandlePort] = None) -> None:
            self._deprovision_step(instance_id, token, in_flight, handle, raise_errors=handle is None)

        if accepts_incomplete:
            self._runner.submit(instance_id, work)
            return token
        work()
        return ""

    def _deprovision_step(
        self,
        instance_id: str,
        token: str,
        in_flight: Optional[TaskHandlePort],
        handle: Optional[TaskHandlePort],
        raise_errors: bool,
    ) -> None:
        log = self._logger.bind(instance_id=instance_id, operation=token)
        service_id: Optional[str] = None
        try:
            _checkpoint(handle)
            if in_flight is not None and not in_flight.wait(self._in_flight_timeout):
                raise UpstreamError(
                    f"previous operation still running after {self._in_flight_timeout:g}s, record kept for retry",
                    instance_id=instance_id,
                )
            instance = self._load(instance_id, GoneError)
            service_id = instance.service_id
            if instance.release_name:
                self._deployer.undeploy(instance.release_name, instance.release_namespace)
            else:
                log.warning("Instance %s has no release recorded, nothing to undeploy", instance_id)
            _checkpoint(handle)
            with self._locks.hold(instance_id):
                try:
                    self._store.delete(instance_id)
                except RecordNotFoundError:
                    log.debug("Record for instance %s was already removed", instance_id)
        except Exception as e:
            description = one_line(f"failed to deprovision service instance {instance_id!r}: {e}")
            log.error("%s", description)
            self._finish_operation(instance_id, token, OperationState.FAILED, description)
            if raise_errors:
                self._reraise(e, description, instance_id, service_id)
            return
        log.info("Deprovision of instance %s is complete", instance_id)

    # Bind

    def bind(
        self,
        instance_id: str,
        service_id: str,
        binding_id: str,
        accepts_incomplete: bool,
        bind_params: Optional[dict[str, Any]] = None,
    ) -> str:
        """Extract credentials for a binding.

        Re-binding with identical parameters replays the stored payload and
        returns an empty token.
        """
        bind_params = dict(bind_params or {})
        with self._locks.hold(instance_id):
            instance = self._load(instance_id, NotFoundError)
            existing = instance.binding(binding_id)
            if existing is not None:
                if existing.state is not None and existing.state.state is OperationState.IN_PROGRESS:
                    raise ConflictError(f"binding {binding_id!r} of instance {instance_id!r} is in progress")
                if existing.has_payload:
                    if existing.parameters == bind_params:
                        self._logger.info("Binding %s of instance %s already exists, replaying", binding_id, instance_id)
                        return ""
                    raise ConflictError(
                        f"binding {binding_id!r} of instance {instance_id!r} already exists with different parameters"
                    )
            if not instance.release_namespace:
                raise NotFoundError(f"service instance {instance_id!r} has no deployed release yet")

            token = self._names.generate(OperationType.BIND.token_prefix)
            self._store.update(
                instance_id,
                binding_state_fields(
                    binding_id,
                    BindingState(
                        state=OperationState.IN_PROGRESS,
                        description=f"binding service instance {instance_id!r}",
                    ),
                ),
            )

        def work(handle: Optional[TaskHandlePort] = None) -> None:
            self._bind_step(instance, service_id, binding_id, bind_params, handle, raise_errors=handle is None)

        if accepts_incomplete:
            self._runner.submit(binding_task_key(instance_id, binding_id), work)
            return token
        work()
        return ""

    def _bind_step(
        self,
        instance: ServiceInstance,
        service_id: str,
        binding_id: str,
        bind_params: dict[str, Any],
        handle: Optional[TaskHandlePort],
        raise_errors: bool,
    ) -> None:
        instance_id = instance.instance_id
        try:
            credentials = self._extract_credentials(instance, service_id or instance.service_id, bind_params)
            _checkpoint(handle)
        except Exception as e:
            description = one_line(f"failed to bind service instance {instance_id!r} (binding {binding_id!r}): {e}")
            self._logger.error("%s", description)
            self._finish_binding(instance_id, binding_id, BindingState(state=OperationState.FAILED, description=description))
            if raise_errors:
                self._reraise(e, description, instance_id, instance.service_id)
            return

        payload = {"credentials": credentials, "parameters": bind_params}
        self._finish_binding(
            instance_id,
            binding_id,
            BindingState(state=OperationState.SUCCEEDED),
            payload=payload,
        )
        self._logger.info("Bound instance %s as binding %s", instance_id, binding_id)

    def _extract_credentials(
        self, instance: ServiceInstance, service_id: str, bind_params: dict[str, Any]
    ) -> dict[str, Any]:
        namespace = instance.release_namespace
        selector = {INSTANCE_LABEL: instance.instance_id}
        services = self._cluster.list_by_label(namespace, selector, SERVICE_KIND)
        if not services:
            raise NotFoundError(
                f"no services labeled for service instance {instance.instance_id!r} in namespace {namespace}"
            )
        secrets = self._cluster.list_by_label(namespace, selector, SECRET_KIND)
        if not secrets:
            raise NotFoundError(
                f"no secrets labeled for service instance {instance.instance_id!r} in namespace {namespace}"
            )

        data: dict[str, Any] = {}
        for secret in secrets:
            data.update(secret.data)

        provider = self._providers.get(service_id)
        if provider is not None:
            merged = instance.params.merged(bind_params)
            creds = provider.bind(services, BindParams(bind_params), ProvisionParams(merged), dict(data))
            data.update(creds)
        return data

    # Unbind and reads

    def unbind(self, instance_id: str, binding_id: str) -> None:
        with self._locks.hold(instance_id):
            instance = self._load(instance_id, GoneError)
            if instance.binding(binding_id) is None:
                raise GoneError(f"binding {binding_id!r} of service instance {instance_id!r} does not exist")
            self._runner.cancel(binding_task_key(instance_id, binding_id))
            self._store.update(instance_id, remove_binding_fields(binding_id))
        self._logger.info("Unbound binding %s of instance %s", binding_id, instance_id)

    def get_binding(self, instance_id: str, binding_id: str) -> dict[str, Any]:
        instance = self._load(instance_id, NotFoundError)
        binding = instance.binding(binding_id)
        if binding is None or not binding.has_payload:
            raise NotFoundError(f"binding {binding_id!r} of service instance {instance_id!r} not found")
        return binding.payload()

    def get_instance(self, instance_id: str) -> ServiceInstance:
        return self._load(instance_id, NotFoundError)

    def last_operation(self, instance_id: str, operation: Optional[str] = None) -> LastOperation:
        instance = self._load(instance_id, GoneError)
        current = instance.last_operation
        if current is None:
            return LastOperation(name="", state=OperationState.SUCCEEDED)
        if operation and operation != current.name:
            raise ConflictError(
                f"operation {operation!r} on service instance {instance_id!r} was superseded by {current.name!r}"
            )
        return current

    def last_binding_operation(self, instance_id: str, binding_id: str) -> BindingState:
        instance = self._load(instance_id, GoneError)
        binding = instance.binding(binding_id)
        if binding is None or binding.state is None:
            raise GoneError(f"binding {binding_id!r} of service instance {instance_id!r} does not exist")
        return binding.state

    def cancel_operation(self, instance_id: str, binding_id: Optional[str] = None) -> bool:
        """Best-effort cancellation of a running background operation."""
        key = binding_task_key(instance_id, binding_id) if binding_id else instance_id
        return self._runner.cancel(key)

    # Helpers

    def _load(self, instance_id: str, missing: Callable[[str], DomainException]) -> ServiceInstance:
        try:
            fields = self._store.get(instance_id)
        except RecordNotFoundError as e:
            raise missing(f"service instance {instance_id!r} does not exist") from e
        try:
            return ServiceInstance.from_record(instance_id, fields)
        except (ValueError, KeyError, TypeError) as e:
            raise RecordStoreError(f"record of service instance {instance_id!r} is corrupt: {e}") from e

    def _finish_operation(self, instance_id: str, token: str, state: OperationState, description: str) -> None:
        """Write a terminal state if ``token`` is still the in-progress operation."""
        with self._locks.hold(instance_id):
            try:
                fields = self._store.get(instance_id)
                if (
                    fields.get(OPERATION_NAME_KEY) != token
                    or fields.get(OPERATION_STATE_KEY) != OperationState.IN_PROGRESS.value
                ):
                    self._logger.warning(
                        "Not recording %s for instance %s: operation %s is no longer current",
                        state.value,
                        instance_id,
                        token,
                    )
                    return
                self._store.update(
                    instance_id, LastOperation(name=token, state=state, description=description).to_fields()
                )
            except RecordStoreError as e:
                self._logger.error("Could not record %s state of operation %s on instance %s: %s", state.value, token, instance_id, e)

    def _finish_binding(
        self,
        instance_id: str,
        binding_id: str,
        state: BindingState,
        payload: Optional[dict[str, Any]] = None,
    ) -> None:
        with self._locks.hold(instance_id):
            try:
                fields = self._store.get(instance_id)
                raw_state = fields.get(binding_state_key(binding_id))
                if raw_state is None or json.loads(raw_state).get("state") != OperationState.IN_PROGRESS.value:
                    self._logger.warning(
                        "Not recording %s for binding %s of instance %s: binding was removed or superseded",
                        state.state.value,
                        binding_id,
                        instance_id,
                    )
                    return
                updates = binding_state_fields(binding_id, state)
                if payload is not None:
                    updates.update(binding_fields(binding_id, payload))
                self._store.update(instance_id, updates)
            except (RecordStoreError, ValueError) as e:
                self._logger.error(
                    "Could not record %s state of binding %s on instance %s: %s", state.state.value, binding_id, instance_id, e
                )

    @staticmethod
    def _reraise(error: Exception, description: str, instance_id: str, chart: Optional[str]) -> None:
        """Propagate a step failure to a synchronous caller as a domain error.

        Upstream failures keep their type but carry ``description``, which
        names the instance and chart. Other domain errors pass through.
        """
        if isinstance(error, UpstreamError):
            raise type(error)(
                description,
                instance_id=instance_id,
                chart=error.chart or chart,
                http_status=error.http_status,
                error_code=error.error_code,
                details=error.details,
            ) from error
        if isinstance(error, DomainException):
            raise error
        raise UpstreamError(description, instance_id=instance_id, chart=chart) from error
