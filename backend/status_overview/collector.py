"""Builds the JSON snapshot for one status category."""

from __future__ import annotations

import functools
import logging
from typing import Optional

from pydantic import TypeAdapter

from status_overview.models import (
    PLACEHOLDER,
    AgentAttributes,
    ControllerAttributes,
    PluginAttributes,
    StatusCategory,
)
from status_overview.runtime import ClusterRuntime, CollectionError, Computer
from status_overview.security import ExecutionContext
from status_overview.telemetry import NodeDetails

logger = logging.getLogger("status_overview.collector")

_AGENTS_ADAPTER = TypeAdapter(list[AgentAttributes])
_CONTROLLER_ADAPTER = TypeAdapter(list[ControllerAttributes])
_PLUGINS_ADAPTER = TypeAdapter(list[PluginAttributes])


async def _node_fields(details: NodeDetails) -> dict[str, str]:
    return {
        "name": await details.hostname(),
        "operating_system": details.operating_system(),
        "num_executors": str(details.num_executors()),
        "memory": details.memory_utilization(),
        "java_version": await details.runtime_version(),
    }


def _agent_status(details: NodeDetails) -> str:
    if details.is_offline():
        return f"Offline ({details.offline_reason()})"
    return "Online"


class StatusCollector:
    def __init__(self, runtime: ClusterRuntime) -> None:
        self.runtime = runtime

    def node_details(self, computer: Computer) -> NodeDetails:
        return NodeDetails(computer)

    async def collect(self, category: StatusCategory, context: ExecutionContext) -> Optional[str]:
        """Return the serialized snapshot, or ``None`` if the category has no payload.

        Failures other than :class:`CollectionError` are re-raised as one.
        """
        collectors = {
            StatusCategory.AGENTS: self.collect_agents,
            StatusCategory.CONTROLLER: self.collect_controller,
            StatusCategory.PLUGINS: self.collect_plugins,
        }
        collect = collectors.get(category)
        if collect is None:
            raise ValueError(f"Unknown status category {category!r}")
        try:
            return await collect(context)
        except CollectionError:
            raise
        except Exception as exc:
            raise CollectionError(f"Collecting {category.value} failed") from exc

    async def collect_plugins(self, context: ExecutionContext) -> str:
        plugins = [
            PluginAttributes(
                name=plugin.short_name,
                display_name=plugin.display_name or plugin.short_name,
                version=plugin.version or PLACEHOLDER,
            )
            for plugin in await self.runtime.list_plugins(context)
        ]
        logger.debug("Collected %d plugins", len(plugins))
        return _PLUGINS_ADAPTER.dump_json(plugins, by_alias=True).decode("utf-8")

    async def collect_agents(self, context: ExecutionContext) -> str:
        rows: list[AgentAttributes] = []
        for node in await self.runtime.list_nodes(context):
            if node is None:
                continue
            computer = await self.runtime.to_computer(node, context)
            if computer is None:
                logger.debug("Node %s has no live computer; skipping", node.name)
                continue
            details = self.node_details(computer)
            rows.append(AgentAttributes(**await _node_fields(details), status=_agent_status(details)))
        logger.debug("Collected %d agents", len(rows))
        return _AGENTS_ADAPTER.dump_json(rows, by_alias=True).decode("utf-8")

    async def collect_controller(self, context: ExecutionContext) -> Optional[str]:
        computer = await self.runtime.get_controller(context)
        if computer is None:
            logger.warning("Controller computer could not be resolved")
            return None
        details = self.node_details(computer)
        row = ControllerAttributes(
            **await _node_fields(details),
            core_version=await details.core_version(functools.partial(self.runtime.get_version, context)),
        )
        return _CONTROLLER_ADAPTER.dump_json([row], by_alias=True).decode("utf-8")
