"""
Operation dispatcher.

Operations are registered by name with the request model they accept and
the fields they require. dispatch() validates a raw request body against
that declaration before any provider is touched, then runs the handler.

Handlers run their steps strictly in sequence: each step feeds the next,
and the first OperationError aborts the rest unchanged. Nothing is kept
between invocations.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

import httpx
import pydantic

from ..config import Settings
from ..errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Per-request context
# ---------------------------------------------------------------------------


@dataclass
class OperationContext:
    """
    Everything a handler may use, built fresh for every request.

    providers is a ProviderRegistry in production and a fake in tests;
    sleep is the poller's suspension point.
    """

    settings: Settings
    providers: Any
    http: httpx.AsyncClient
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RequiredField:
    """
    A required body field. `fields` lists wire names; at least one must be
    non-empty, otherwise the request fails with `code`.
    """

    fields: tuple[str, ...]
    code: str
    message: str


def require(*fields: str, code: str | None = None, message: str | None = None) -> RequiredField:
    if not fields:
        raise ValueError("require() needs at least one field name")
    if code is None:
        code = "MISSING_" + _screaming_snake(fields[0])
    if message is None:
        message = f"Missing {' or '.join(fields)} field"
    return RequiredField(fields=fields, code=code, message=message)


def _screaming_snake(name: str) -> str:
    out = []
    for ch in name:
        if ch.isupper() and out:
            out.append("_")
        out.append(ch.upper())
    return "".join(out)


Handler = Callable[[OperationContext, Any], Awaitable[dict[str, Any]]]


@dataclass(frozen=True)
class RegisteredOperation:
    name: str
    handler: Handler
    request_model: type[pydantic.BaseModel]
    required: tuple[RequiredField, ...] = field(default_factory=tuple)


_registry: dict[str, RegisteredOperation] = {}


def operation(name: str, request_model: type[pydantic.BaseModel], required: list[RequiredField] | None = None):
    """
    Decorator that registers an async handler for an operation name.

    Usage:
        @operation("animate", AnimateRequest, required=[require("imageUrl", code="MISSING_IMAGE")])
        async def _op_animate(ctx: OperationContext, request: AnimateRequest) -> dict[str, Any]:
            ...
    """
    def decorator(fn: Handler) -> Handler:
        _registry[name] = RegisteredOperation(
            name=name,
            handler=fn,
            request_model=request_model,
            required=tuple(required or ()),
        )
        return fn
    return decorator


def get_operation(name: str) -> RegisteredOperation | None:
    return _registry.get(name)


def list_operations() -> list[str]:
    return sorted(_registry)


# ---------------------------------------------------------------------------
# Validation + dispatch
# ---------------------------------------------------------------------------


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, dict, tuple)):
        return len(value) == 0
    return False


def validate_request(registered: RegisteredOperation, body: Any) -> pydantic.BaseModel:
    """Check required fields, then parse the body into the operation's request model."""
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")

    for req in registered.required:
        if all(is_empty(body.get(f)) for f in req.fields):
            raise ValidationError(req.message, code=req.code)

    try:
        return registered.request_model.model_validate(body)
    except pydantic.ValidationError as e:
        raise ValidationError("Invalid request body", details=str(e)) from e


async def dispatch(name: str, body: Any, context: OperationContext) -> dict[str, Any]:
    """
    Validate and run one operation.

    Raises:
        NotFoundError: unknown operation name
        ValidationError: missing/empty required field or malformed body
        OperationError: whatever the failing step raised
    """
    registered = get_operation(name)
    if registered is None:
        raise NotFoundError(f"Unknown operation: {name}")

    request = validate_request(registered, body)

    logger.info("Operation %s started", name)
    start_time = time.time()
    try:
        result = await registered.handler(context, request)
    except Exception as e:
        elapsed_ms = int((time.time() - start_time) * 1000)
        logger.warning("Operation %s failed after %d ms: %r", name, elapsed_ms, e)
        raise
    elapsed_ms = int((time.time() - start_time) * 1000)
    logger.info("Operation %s completed in %d ms", name, elapsed_ms)
    return result
