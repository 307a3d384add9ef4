"""Dependencies shared by the domain routers"""

from fastapi import Request

from ..errors import UnsupportedMediaError
from ..state import SharedAdaptor


def get_shared_adaptor(request: Request) -> SharedAdaptor:
    return request.app.state.shared_adaptor


async def require_json(request: Request) -> None:
    """Reject bodies that are not declared as JSON"""
    content_type = request.headers.get("content-type", "")
    if content_type.split(";")[0].strip().lower() != "application/json":
        raise UnsupportedMediaError()
