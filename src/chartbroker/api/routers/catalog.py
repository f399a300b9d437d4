"""Catalog route."""

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from chartbroker.api.dependencies import get_broker

router = APIRouter(prefix="/v2", tags=["Catalog"])

BROKER = Depends(get_broker)


@router.get("/catalog", summary="Get Catalog", description="List services and plans")
async def get_catalog(broker=BROKER) -> JSONResponse:
    catalog = await run_in_threadpool(broker.get_catalog)
    return JSONResponse(content=jsonable_encoder(catalog))
