"""Service binding routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from chartbroker.api.dependencies import get_broker
from chartbroker.api.models.requests import BindRequestModel
from chartbroker.application.dto.commands import BindInstanceCommand, UnbindInstanceCommand
from chartbroker.application.dto.queries import GetBindingQuery, LastBindingOperationQuery

router = APIRouter(prefix="/v2/service_instances/{instance_id}/service_bindings", tags=["Service Bindings"])

BROKER = Depends(get_broker)
ACCEPTS_INCOMPLETE = Query(False, description="Caller supports asynchronous operations")
OPERATION_QUERY = Query(None)
SERVICE_ID_QUERY = Query(None)
PLAN_ID_QUERY = Query(None)


@router.put("/{binding_id}", summary="Bind", description="Create a binding")
async def bind(
    instance_id: str,
    binding_id: str,
    body: BindRequestModel,
    accepts_incomplete: bool = ACCEPTS_INCOMPLETE,
    broker=BROKER,
) -> JSONResponse:
    command = BindInstanceCommand(
        instance_id=instance_id,
        binding_id=binding_id,
        service_id=body.service_id,
        plan_id=body.plan_id,
        accepts_incomplete=accepts_incomplete,
        parameters=body.parameters or {},
    )
    result = await run_in_threadpool(broker.bind, command)
    if result.is_async:
        status = 202
    else:
        status = 201 if result.created else 200
    return JSONResponse(status_code=status, content=jsonable_encoder(result.to_body()))


@router.get("/{binding_id}", summary="Get Binding", description="Fetch a stored binding")
async def get_binding(instance_id: str, binding_id: str, broker=BROKER) -> JSONResponse:
    query = GetBindingQuery(instance_id=instance_id, binding_id=binding_id)
    result = await run_in_threadpool(broker.get_binding, query)
    return JSONResponse(content=jsonable_encoder(result.to_body()))


@router.get("/{binding_id}/last_operation", summary="Binding Last Operation", description="Poll a binding operation")
async def binding_last_operation(
    instance_id: str,
    binding_id: str,
    operation: Optional[str] = OPERATION_QUERY,
    broker=BROKER,
) -> JSONResponse:
    query = LastBindingOperationQuery(instance_id=instance_id, binding_id=binding_id, operation=operation)
    result = await run_in_threadpool(broker.binding_last_operation, query)
    return JSONResponse(content=jsonable_encoder(result.to_body()))


@router.delete("/{binding_id}", summary="Unbind", description="Remove a binding")
async def unbind(
    instance_id: str,
    binding_id: str,
    service_id: Optional[str] = SERVICE_ID_QUERY,
    plan_id: Optional[str] = PLAN_ID_QUERY,
    broker=BROKER,
) -> JSONResponse:
    command = UnbindInstanceCommand(instance_id=instance_id, binding_id=binding_id)
    await run_in_threadpool(broker.unbind, command)
    return JSONResponse(status_code=200, content={})
