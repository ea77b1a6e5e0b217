"""Status overview API: application factory and wiring."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from status_overview import config
from status_overview.collector import StatusCollector
from status_overview.dependencies import StatusServices
from status_overview.log_redact import install_log_redaction
from status_overview.models import StatusCategory
from status_overview.overview_config import OverviewConfigStore
from status_overview.routers.admin import router as admin_router
from status_overview.routers.status import router as status_router
from status_overview.runtime import ClusterRuntime, CollectionError
from status_overview.runtime.jenkins import JenkinsRuntime
from status_overview.security import AuthorizationError, PermissionEvaluator
from status_overview.snapshot_cache import SnapshotCache

# --- Logging ---
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
install_log_redaction()
logger = logging.getLogger("status_overview.api")


def _log_startup_env_warnings() -> None:
    if not config.JENKINS_URL:
        logger.warning("JENKINS_URL is not set; status collection will fail.")
    if not (config.JENKINS_USER and config.JENKINS_API_TOKEN):
        logger.warning("JENKINS_USER/JENKINS_API_TOKEN are not set; collection runs anonymously.")
    if not config.STATUS_READ_TOKEN and not config.ADMIN_TOKEN:
        logger.warning("Neither STATUS_READ_TOKEN nor ADMIN_TOKEN is set; every status request will be denied.")


def _default_runtime() -> JenkinsRuntime:
    return JenkinsRuntime(
        config.JENKINS_URL,
        user=config.JENKINS_USER,
        api_token=config.JENKINS_API_TOKEN,
        timeout_seconds=config.REQUEST_TIMEOUT_SECONDS,
        verify_ssl=config.JENKINS_VERIFY_SSL,
    )


async def _authorization_error_handler(_: Request, exc: AuthorizationError) -> JSONResponse:
    logger.info("Access denied: %s", exc)
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": str(exc)})


async def _collection_error_handler(_: Request, exc: CollectionError) -> JSONResponse:
    logger.error("Status collection failed", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Status collection failed"},
    )


def create_app(
    *,
    runtime: Optional[ClusterRuntime] = None,
    permissions: Optional[PermissionEvaluator] = None,
    overview_config: Optional[OverviewConfigStore] = None,
    snapshot_cache: Optional[SnapshotCache[StatusCategory, str]] = None,
) -> FastAPI:
    if permissions is None:
        permissions = PermissionEvaluator(config.STATUS_READ_TOKEN, config.ADMIN_TOKEN)
    if runtime is None:
        runtime = _default_runtime()
    if overview_config is None:
        overview_config = OverviewConfigStore(config.OVERVIEW_CONFIG_PATH)
    if snapshot_cache is None:
        snapshot_cache = SnapshotCache(ttl_seconds=config.SNAPSHOT_TTL_SECONDS)
    services = StatusServices(
        permissions=permissions,
        collector=StatusCollector(runtime),
        cache=snapshot_cache,
        overview_config=overview_config,
    )

    @asynccontextmanager
    async def _lifespan(_: FastAPI):
        _log_startup_env_warnings()
        try:
            yield
        finally:
            services.cache.clear()

    application = FastAPI(
        title="Status Overview",
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=_lifespan,
    )
    application.state.services = services
    application.add_exception_handler(AuthorizationError, _authorization_error_handler)
    application.add_exception_handler(CollectionError, _collection_error_handler)
    application.include_router(status_router)
    application.include_router(admin_router)

    @application.get("/healthz")
    async def healthz():
        return {"status": "ok"}

    return application


app = create_app()
