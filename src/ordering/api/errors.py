from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from ordering.exceptions import NotAuthenticated


async def _not_authenticated(request: Request, exc: NotAuthenticated) -> JSONResponse:
    return JSONResponse(status_code=401, content={"error": exc.messages})


def install_exception_handlers(app: FastAPI) -> None:
    """Protean's domain-error mapping (400/404), plus 401 for a missing customer."""
    register_exception_handlers(app)
    app.add_exception_handler(NotAuthenticated, _not_authenticated)
