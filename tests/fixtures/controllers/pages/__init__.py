"""Pages controller: server-rendered views."""

from fastapi import APIRouter, FastAPI, Request

_router = APIRouter(prefix="/pages")


@_router.get("/home")
async def home(request: Request):
    return request.state.render("home.html", {"name": "visitor"})


@_router.get("/broken")
async def broken():
    raise RuntimeError("page exploded")


def register(app: FastAPI) -> None:
    app.include_router(_router)
