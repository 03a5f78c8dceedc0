from typing import Awaitable, Callable
from uuid import uuid4

from fastapi import FastAPI, Request, Response


RequestHandler = Callable[[Request], Awaitable[Response]]


async def attach_request_id(request: Request, call_next):
    request_id = (
        request.headers.get("X-Request-ID")
        or request.headers.get("X-Correlation-ID")
        or str(uuid4())
    )
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


def build_app(title: str, handler: RequestHandler) -> FastAPI:
    """Serverless-style app: one handler answers every method on every path."""
    app = FastAPI(title=title, version="0.1.0", docs_url=None, redoc_url=None, openapi_url=None)
    app.middleware("http")(attach_request_id)
    # methods=None: the route matches every method, HEAD and TRACE included.
    app.add_route("/{path:path}", handler, include_in_schema=False)
    return app
