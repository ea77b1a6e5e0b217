"""Cluster runtime backed by the Jenkins remote API."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional
from urllib.parse import quote

import httpx

from status_overview.log_redact import httpx_event_hooks
from status_overview.models import NodeRef, PluginInfo
from status_overview.runtime import CollectionError, TelemetryUnavailable
from status_overview.security import ExecutionContext

logger = logging.getLogger("status_overview.runtime.jenkins")

CONTROLLER_CLASS_SUFFIX = "$MasterComputer"
HOSTNAME_SCRIPT = "println(InetAddress.localHost.canonicalHostName)"
SYSTEM_PROPERTIES_SCRIPT = (
    "println(groovy.json.JsonOutput.toJson("
    "System.getProperties().collectEntries { k, v -> [(k.toString()): v?.toString()] }))"
)


class JenkinsNode(NodeRef):
    """Agent entry as listed by ``/computer/api/json``."""

    entry: dict[str, Any]


def _is_controller(entry: Mapping[str, Any]) -> bool:
    return str(entry.get("_class", "")).endswith(CONTROLLER_CLASS_SUFFIX)


class JenkinsComputer:
    def __init__(self, runtime: "JenkinsRuntime", entry: Mapping[str, Any], context: ExecutionContext) -> None:
        self._runtime = runtime
        self._entry = entry
        self._context = context

    @property
    def name(self) -> str:
        return str(self._entry.get("displayName", ""))

    def _script_path(self) -> str:
        if _is_controller(self._entry):
            return "/scriptText"
        return f"/computer/{quote(self.name, safe='')}/scriptText"

    async def _run_script(self, script: str) -> str:
        if self.is_offline():
            raise TelemetryUnavailable(f"{self.name} is offline")
        try:
            response = await self._runtime.request(
                "POST", self._script_path(), self._context, data={"script": script}
            )
        except httpx.HTTPError as exc:
            raise TelemetryUnavailable(f"Script console unavailable for {self.name}") from exc
        return response.text.strip()

    async def get_host_name(self) -> Optional[str]:
        return await self._run_script(HOSTNAME_SCRIPT) or None

    def get_monitor_data(self) -> Optional[Mapping[str, Any]]:
        data = self._entry.get("monitorData")
        return data if isinstance(data, Mapping) else None

    def get_num_executors(self) -> int:
        return int(self._entry.get("numExecutors", 0))

    def is_offline(self) -> bool:
        return bool(self._entry.get("offline", False))

    def get_offline_cause_reason(self) -> Optional[str]:
        return self._entry.get("offlineCauseReason")

    async def get_system_properties(self) -> Mapping[str, Any]:
        raw = await self._run_script(SYSTEM_PROPERTIES_SCRIPT)
        try:
            properties = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise TelemetryUnavailable(f"Unreadable system properties from {self.name}") from exc
        if not isinstance(properties, dict):
            raise TelemetryUnavailable(f"Unexpected system properties from {self.name}")
        return properties


class JenkinsRuntime:
    def __init__(
        self,
        base_url: str,
        *,
        user: str = "",
        api_token: str = "",
        timeout_seconds: float = 10.0,
        verify_ssl: bool = True,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._user = user
        self._api_token = api_token
        self._timeout = httpx.Timeout(timeout=timeout_seconds)
        self._verify_ssl = verify_ssl

    def _auth(self, context: ExecutionContext) -> Optional[httpx.BasicAuth]:
        # System credentials are only ever used on behalf of SYSTEM.
        if context.elevated and self._user and self._api_token:
            return httpx.BasicAuth(self._user, self._api_token)
        return None

    async def request(
        self,
        method: str,
        path: str,
        context: ExecutionContext,
        *,
        params: Optional[dict[str, str]] = None,
        data: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        if not self.base_url:
            raise CollectionError("JENKINS_URL is not configured")
        async with httpx.AsyncClient(
            verify=self._verify_ssl,
            timeout=self._timeout,
            auth=self._auth(context),
            event_hooks=httpx_event_hooks(),
        ) as client:
            response = await client.request(method, self.base_url + path, params=params, data=data)
        response.raise_for_status()
        return response

    async def _get_json(self, path: str, context: ExecutionContext, params: dict[str, str]) -> dict[str, Any]:
        try:
            response = await self.request("GET", path, context, params=params)
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Jenkins request to %s failed (%s)", path, exc.__class__.__name__)
            raise CollectionError(f"Jenkins request to {path} failed") from exc
        if not isinstance(payload, dict):
            raise CollectionError(f"Unexpected payload from {path}")
        return payload

    async def _computer_entries(self, context: ExecutionContext) -> list[dict[str, Any]]:
        payload = await self._get_json("/computer/api/json", context, {"depth": "1"})
        entries = payload.get("computer")
        if not isinstance(entries, list):
            raise CollectionError("Computer list missing from Jenkins response")
        return [entry for entry in entries if isinstance(entry, dict)]

    async def list_nodes(self, context: ExecutionContext) -> list[Optional[NodeRef]]:
        return [
            JenkinsNode(name=str(entry.get("displayName", "")), entry=entry)
            for entry in await self._computer_entries(context)
            if not _is_controller(entry)
        ]

    async def to_computer(self, node: NodeRef, context: ExecutionContext) -> Optional[JenkinsComputer]:
        if isinstance(node, JenkinsNode):
            entry: Optional[dict[str, Any]] = node.entry
        else:
            entry = next(
                (e for e in await self._computer_entries(context) if e.get("displayName") == node.name),
                None,
            )
        # Jenkins keeps no computer for an agent configured with zero executors.
        if entry is None or not entry.get("numExecutors"):
            return None
        return JenkinsComputer(self, entry, context)

    async def get_controller(self, context: ExecutionContext) -> Optional[JenkinsComputer]:
        for entry in await self._computer_entries(context):
            if _is_controller(entry):
                return JenkinsComputer(self, entry, context)
        return None

    async def list_plugins(self, context: ExecutionContext) -> list[PluginInfo]:
        payload = await self._get_json(
            "/pluginManager/api/json",
            context,
            {"depth": "1", "tree": "plugins[shortName,longName,version]"},
        )
        plugins: list[PluginInfo] = []
        for raw in payload.get("plugins") or []:
            if not isinstance(raw, dict) or not raw.get("shortName"):
                continue
            plugins.append(
                PluginInfo(
                    short_name=raw["shortName"],
                    display_name=raw.get("longName"),
                    version=raw.get("version"),
                )
            )
        return plugins

    async def get_version(self, context: ExecutionContext) -> Optional[str]:
        try:
            response = await self.request("GET", "/api/json", context, params={"tree": "mode"})
        except httpx.HTTPError as exc:
            raise TelemetryUnavailable("Jenkins version unavailable") from exc
        return response.headers.get("X-Jenkins") or None
