"""Scheduled maintenance endpoints"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, Response

from ... import config
from ..dependencies import get_shared_adaptor
from ...state import SharedAdaptor
from .service import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])


def get_task_service(shared: SharedAdaptor = Depends(get_shared_adaptor)) -> TaskService:
    return TaskService(shared, cron_key=config.CRON_KEY, retention_days=config.RETENTION_DAYS)


@router.get(
    "/cleanup",
    response_class=Response,
    responses={
        200: {"description": "Cleanup complete"},
        401: {"description": "Missing or incorrect X-Cron-Key header"},
        429: {"description": "Too many requests"},
    },
)
async def cleanup(
    x_cron_key: Optional[str] = Header(None),
    service: TaskService = Depends(get_task_service),
):
    """Delete events not visited in the retention window"""
    await service.cleanup(x_cron_key)
    return Response(status_code=200)
