"""Service instance routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from chartbroker.api.dependencies import get_broker
from chartbroker.api.models.requests import ProvisionRequestModel, UpdateRequestModel
from chartbroker.application.dto.commands import (
    DeprovisionInstanceCommand,
    ProvisionInstanceCommand,
    UpdateInstanceCommand,
)
from chartbroker.application.dto.queries import LastOperationQuery

router = APIRouter(prefix="/v2/service_instances", tags=["Service Instances"])

BROKER = Depends(get_broker)
ACCEPTS_INCOMPLETE = Query(False, description="Caller supports asynchronous operations")
OPERATION_QUERY = Query(None, description="Operation token returned by an asynchronous call")
SERVICE_ID_QUERY = Query(None)
PLAN_ID_QUERY = Query(None)


@router.put("/{instance_id}", summary="Provision", description="Provision a service instance")
async def provision(
    instance_id: str,
    body: ProvisionRequestModel,
    accepts_incomplete: bool = ACCEPTS_INCOMPLETE,
    broker=BROKER,
) -> JSONResponse:
    command = ProvisionInstanceCommand(
        instance_id=instance_id,
        service_id=body.service_id,
        plan_id=body.plan_id,
        accepts_incomplete=accepts_incomplete,
        parameters=body.parameters or {},
        context=body.context or {},
    )
    result = await run_in_threadpool(broker.provision, command)
    status = 202 if result.is_async else 201
    return JSONResponse(status_code=status, content=jsonable_encoder(result.to_body()))


@router.patch("/{instance_id}", summary="Update", description="Update a service instance (no-op)")
async def update(
    instance_id: str,
    body: UpdateRequestModel,
    accepts_incomplete: bool = ACCEPTS_INCOMPLETE,
    broker=BROKER,
) -> JSONResponse:
    command = UpdateInstanceCommand(
        instance_id=instance_id,
        service_id=body.service_id,
        plan_id=body.plan_id,
        accepts_incomplete=accepts_incomplete,
        parameters=body.parameters or {},
    )
    result = await run_in_threadpool(broker.update, command)
    return JSONResponse(status_code=200, content=jsonable_encoder(result.to_body()))


@router.delete("/{instance_id}", summary="Deprovision", description="Deprovision a service instance")
async def deprovision(
    instance_id: str,
    accepts_incomplete: bool = ACCEPTS_INCOMPLETE,
    service_id: Optional[str] = SERVICE_ID_QUERY,
    plan_id: Optional[str] = PLAN_ID_QUERY,
    broker=BROKER,
) -> JSONResponse:
    command = DeprovisionInstanceCommand(
        instance_id=instance_id,
        accepts_incomplete=accepts_incomplete,
        service_id=service_id,
        plan_id=plan_id,
    )
    result = await run_in_threadpool(broker.deprovision, command)
    status = 202 if result.is_async else 200
    return JSONResponse(status_code=status, content=jsonable_encoder(result.to_body()))


@router.get("/{instance_id}/last_operation", summary="Last Operation", description="Poll an instance operation")
async def last_operation(
    instance_id: str,
    operation: Optional[str] = OPERATION_QUERY,
    service_id: Optional[str] = SERVICE_ID_QUERY,
    plan_id: Optional[str] = PLAN_ID_QUERY,
    broker=BROKER,
) -> JSONResponse:
    query = LastOperationQuery(instance_id=instance_id, operation=operation)
    result = await run_in_threadpool(broker.last_operation, query)
    return JSONResponse(content=jsonable_encoder(result.to_body()))
