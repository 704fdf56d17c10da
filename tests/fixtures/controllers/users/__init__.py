"""Users controller: registers its routes on the app it is given."""

from fastapi import APIRouter, FastAPI

_router = APIRouter(prefix="/users")

USERS = ["ada", "grace"]


@_router.get("")
async def list_users():
    return {"users": USERS}


@_router.delete("/{user_id}")
async def delete_user(user_id: str):
    return {"deleted": user_id}


@_router.put("/{user_id}")
async def replace_user(user_id: str):
    return {"replaced": user_id}


def register(app: FastAPI) -> None:
    app.include_router(_router)
