"""Admin endpoints for the overview link configuration."""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from status_overview.dependencies import StatusServices, get_services, require_admin
from status_overview.models import LinkCheckResult, OverviewConfig, OverviewConfigUpdate
from status_overview.overview_config import INVALID_LINK_MESSAGE, InvalidOverviewLinkError, is_acceptable_link
from status_overview.security import ExecutionContext

logger = logging.getLogger("status_overview.admin")

router = APIRouter(prefix="/api/admin/status-overview", tags=["admin"])


@router.get("/config", response_model=OverviewConfig)
async def get_config(
    _: ExecutionContext = Depends(require_admin),
    services: StatusServices = Depends(get_services),
):
    return await asyncio.to_thread(services.overview_config.get)


@router.put("/config", response_model=OverviewConfig)
async def put_config(
    payload: OverviewConfigUpdate,
    caller: ExecutionContext = Depends(require_admin),
    services: StatusServices = Depends(get_services),
):
    try:
        saved = await asyncio.to_thread(services.overview_config.set_overview_link, payload.overview_link)
    except InvalidOverviewLinkError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    logger.info("Overview link changed by %s", caller.identity)
    return saved


@router.get("/config/check", response_model=LinkCheckResult)
async def check_config(
    overview_link: str = Query(default="", alias="overviewLink"),
    _: ExecutionContext = Depends(require_admin),
):
    if is_acceptable_link(overview_link):
        return LinkCheckResult(kind="ok")
    return LinkCheckResult(kind="error", message=INVALID_LINK_MESSAGE)
