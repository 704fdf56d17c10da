"""Orders controller: exposes a module-level router."""

from fastapi import APIRouter

from .serializers import serialize_order

router = APIRouter(prefix="/orders")


@router.get("")
async def list_orders():
    return {"orders": [serialize_order(1, 9.5)]}
