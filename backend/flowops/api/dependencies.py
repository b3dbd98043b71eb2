"""
Request-scoped dependencies: settings, the shared HTTP and SDK clients, and
the operation context handed to every dispatcher call.
"""

from __future__ import annotations

import httpx
from fastapi import Depends, Request

from ..config import Settings
from ..providers.registry import ProviderRegistry, SDKClients
from ..services.operation_dispatcher import OperationContext


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_sdk_clients(request: Request) -> SDKClients:
    return request.app.state.sdk_clients


def get_operation_context(
    settings: Settings = Depends(get_settings),
    http: httpx.AsyncClient = Depends(get_http_client),
    clients: SDKClients = Depends(get_sdk_clients),
) -> OperationContext:
    """Fresh context per request over the application's long-lived clients."""
    return OperationContext(
        settings=settings,
        providers=ProviderRegistry(settings, http, clients),
        http=http,
    )
