"""Status overview endpoints: agents, controller, plugins and the nav link."""

import asyncio
import functools
import logging

from fastapi import APIRouter, Depends, Request, Response, status

from status_overview.dependencies import StatusServices, get_services, require_read
from status_overview.models import OverviewLink, StatusCategory
from status_overview.responses import cors_json_response
from status_overview.security import ExecutionContext

logger = logging.getLogger("status_overview.status")

router = APIRouter(prefix="/status-overview", tags=["status"])

LINK_ICON = "monitor.png"
LINK_DISPLAY_NAME = "Status Overview"


def _remote_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def _snapshot(category: StatusCategory, services: StatusServices) -> Response:
    with services.permissions.elevated() as context:
        payload = await services.cache.get(
            category,
            functools.partial(services.collector.collect, category, context),
        )

    if payload is None:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    link_root = await asyncio.to_thread(services.overview_config.link_root)
    return cors_json_response(payload, link_root)


@router.post("/agents")
async def post_agents(
    request: Request,
    caller: ExecutionContext = Depends(require_read),
    services: StatusServices = Depends(get_services),
):
    logger.debug("Agents status request from %r (%s)", _remote_host(request), caller.identity)
    return await _snapshot(StatusCategory.AGENTS, services)


@router.post("/controller")
async def post_controller(
    request: Request,
    caller: ExecutionContext = Depends(require_read),
    services: StatusServices = Depends(get_services),
):
    logger.debug("Controller status request from %r (%s)", _remote_host(request), caller.identity)
    return await _snapshot(StatusCategory.CONTROLLER, services)


@router.post("/plugins")
async def post_plugins(
    request: Request,
    caller: ExecutionContext = Depends(require_read),
    services: StatusServices = Depends(get_services),
):
    logger.debug("Plugins status request from %r (%s)", _remote_host(request), caller.identity)
    return await _snapshot(StatusCategory.PLUGINS, services)


@router.get("/link", response_model=OverviewLink)
async def get_link(
    _: ExecutionContext = Depends(require_read),
    services: StatusServices = Depends(get_services),
):
    overview_link = await asyncio.to_thread(services.overview_config.overview_link)
    if not overview_link:
        return OverviewLink()
    return OverviewLink(icon_file_name=LINK_ICON, display_name=LINK_DISPLAY_NAME, url_name=overview_link)
