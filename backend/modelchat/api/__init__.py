# modelchat/api/__init__.py
from typing import Any, Callable, NamedTuple, Optional

from fastapi import APIRouter


class Endpoint(NamedTuple):
    method: str
    path: str
    handler: Callable[..., Any]
    status_code: Optional[int] = None
    response_model: Any = None


def build_router(endpoints: tuple[Endpoint, ...], **router_options) -> APIRouter:
    """Register each endpoint on its own, one route per definition."""
    router = APIRouter(**router_options)
    for endpoint in endpoints:
        router.add_api_route(
            endpoint.path,
            endpoint.handler,
            methods=[endpoint.method],
            status_code=endpoint.status_code,
            response_model=endpoint.response_model,
            name=endpoint.handler.__name__
        )
    return router
