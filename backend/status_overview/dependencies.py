"""Request-scoped dependencies shared by the routers."""

from dataclasses import dataclass

from fastapi import Depends, Header, Request

from status_overview.collector import StatusCollector
from status_overview.models import StatusCategory
from status_overview.overview_config import OverviewConfigStore
from status_overview.security import ExecutionContext, PermissionEvaluator
from status_overview.snapshot_cache import SnapshotCache


@dataclass
class StatusServices:
    """Collaborators owned by one application instance."""

    permissions: PermissionEvaluator
    collector: StatusCollector
    cache: SnapshotCache[StatusCategory, str]
    overview_config: OverviewConfigStore


def get_services(request: Request) -> StatusServices:
    return request.app.state.services


def get_caller(
    authorization: str = Header(default=""),
    services: StatusServices = Depends(get_services),
) -> ExecutionContext:
    return services.permissions.authenticate(authorization)


def require_read(
    caller: ExecutionContext = Depends(get_caller),
    services: StatusServices = Depends(get_services),
) -> ExecutionContext:
    services.permissions.require_read_permission(caller)
    return caller


def require_admin(
    caller: ExecutionContext = Depends(get_caller),
    services: StatusServices = Depends(get_services),
) -> ExecutionContext:
    services.permissions.require_admin_permission(caller)
    return caller
