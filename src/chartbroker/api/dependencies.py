"""FastAPI dependencies."""

from fastapi import Request

from chartbroker.application.services.broker_service import ServiceBroker


def get_broker(request: Request) -> ServiceBroker:
    """Broker instance attached to the application state at startup."""
    return request.app.state.broker
