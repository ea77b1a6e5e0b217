"""Contracts for the cluster runtime that supplies nodes, computers and plugins."""

from typing import Any, Mapping, Optional, Protocol, Sequence

from status_overview.models import NodeRef, PluginInfo
from status_overview.security import ExecutionContext

# Monitor data keys, as published by the controller's node monitors.
ARCHITECTURE_MONITOR = "hudson.node_monitors.ArchitectureMonitor"
SWAP_SPACE_MONITOR = "hudson.node_monitors.SwapSpaceMonitor"


class TelemetryUnavailable(Exception):
    """Raised by a computer when one attribute cannot be fetched."""


class CollectionError(Exception):
    """Raised when the runtime cannot enumerate nodes, computers or plugins."""


class Computer(Protocol):
    """Live handle for one controller or agent."""

    async def get_host_name(self) -> Optional[str]:
        """May raise; ``None`` means the agent did not report a hostname."""
        ...

    def get_monitor_data(self) -> Optional[Mapping[str, Any]]: ...

    def get_num_executors(self) -> int: ...

    def is_offline(self) -> bool: ...

    def get_offline_cause_reason(self) -> Optional[str]: ...

    async def get_system_properties(self) -> Mapping[str, Any]:
        """May raise when the agent channel is unavailable."""
        ...


class ClusterRuntime(Protocol):
    async def list_nodes(self, context: ExecutionContext) -> Sequence[Optional[NodeRef]]: ...

    async def to_computer(self, node: NodeRef, context: ExecutionContext) -> Optional[Computer]:
        """Resolve a node to its live computer, or ``None`` if it has none."""
        ...

    async def get_controller(self, context: ExecutionContext) -> Optional[Computer]: ...

    async def list_plugins(self, context: ExecutionContext) -> Sequence[PluginInfo]: ...

    async def get_version(self, context: ExecutionContext) -> Optional[str]: ...
