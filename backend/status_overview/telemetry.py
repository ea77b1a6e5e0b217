"""Placeholder-safe view of one computer's telemetry.

Every accessor is isolated: a failure fetching one attribute is logged and
replaced with :data:`PLACEHOLDER`, and never prevents the others from
being read.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Mapping, Optional, TypeVar

from status_overview.models import PLACEHOLDER, MemoryUsage
from status_overview.runtime import ARCHITECTURE_MONITOR, SWAP_SPACE_MONITOR, Computer

logger = logging.getLogger("status_overview.telemetry")

T = TypeVar("T")

GIB = 1024 ** 3
RUNTIME_NAME_PROPERTY = "java.runtime.name"
RUNTIME_VERSION_PROPERTY = "java.runtime.version"


def bytes_to_gb(value: int) -> int:
    """Round bytes to whole GiB, half-up, without float error."""
    return (value + GIB // 2) // GIB


def _try_field(what: str, fetch: Callable[[], Optional[T]]) -> T | str:
    try:
        value = fetch()
    except Exception:
        logger.warning("Failed to obtain %s", what, exc_info=True)
        return PLACEHOLDER
    return PLACEHOLDER if value is None else value


async def _try_field_async(what: str, fetch: Callable[[], Awaitable[Optional[T]]]) -> T | str:
    try:
        value = await fetch()
    except Exception:
        logger.warning("Failed to obtain %s", what, exc_info=True)
        return PLACEHOLDER
    return PLACEHOLDER if value is None else value


class NodeDetails:
    def __init__(self, computer: Computer) -> None:
        if computer is None:
            raise ValueError("computer must not be None")
        self._computer = computer

    def _monitor_data(self) -> Mapping[str, Any]:
        return self._computer.get_monitor_data() or {}

    async def hostname(self) -> str:
        value = await _try_field_async("hostname", self._computer.get_host_name)
        return value.lower()

    def operating_system(self) -> str:
        return str(_try_field("operating system", lambda: self._monitor_data().get(ARCHITECTURE_MONITOR)))

    def num_executors(self) -> int:
        return self._computer.get_num_executors()

    def is_offline(self) -> bool:
        return self._computer.is_offline()

    def offline_reason(self) -> str:
        return str(_try_field("offline cause", self._computer.get_offline_cause_reason))

    def memory_utilization(self) -> str:
        def _format() -> Optional[str]:
            raw = self._monitor_data().get(SWAP_SPACE_MONITOR)
            if raw is None:
                return None
            usage = raw if isinstance(raw, MemoryUsage) else MemoryUsage.model_validate(raw)
            used = usage.total_physical_memory - usage.available_physical_memory
            return f"{bytes_to_gb(used)}/{bytes_to_gb(usage.total_physical_memory)} GB"

        return _try_field("memory utilization", _format)

    async def runtime_version(self) -> str:
        try:
            properties = await self._computer.get_system_properties()
        except Exception:
            logger.warning("Failed to obtain runtime version", exc_info=True)
            return PLACEHOLDER

        name = properties.get(RUNTIME_NAME_PROPERTY)
        version = properties.get(RUNTIME_VERSION_PROPERTY)
        return f"{PLACEHOLDER if name is None else name} {PLACEHOLDER if version is None else version}"

    async def core_version(self, fetch: Callable[[], Awaitable[Optional[str]]]) -> str:
        return str(await _try_field_async("core version", fetch))
