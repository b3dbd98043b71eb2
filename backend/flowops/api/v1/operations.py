"""
Operation endpoints: one POST route per registered operation name.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from ...auth.dependencies import require_token
from ...api.dependencies import get_operation_context
from ...services import operations  # noqa: F401  (registers handlers)
from ...services.operation_dispatcher import OperationContext, dispatch, list_operations

router = APIRouter(
    prefix="/operations",
    tags=["operations"],
    dependencies=[Depends(require_token)],
)


@router.get("")
async def get_operations():
    """List available operation names."""
    return {"operations": list_operations()}


@router.post("/{name}")
async def run_operation(
    name: str,
    body: Any = Body(default=None),
    context: OperationContext = Depends(get_operation_context),
) -> dict[str, Any]:
    """
    Run one operation.

    The body is passed to the dispatcher as-is; the operation validates its
    own required fields and answers {error, code} on failure.
    """
    return await dispatch(name, body if body is not None else {}, context)
