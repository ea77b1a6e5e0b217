"""Wire and domain models for the status overview API."""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

PLACEHOLDER = "<unknown>"


class StatusCategory(str, Enum):
    CONTROLLER = "controller"
    AGENTS = "agents"
    PLUGINS = "plugins"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class NodeAttributes(CamelModel):
    """One row per controller or agent; every field is always a string."""

    name: str
    operating_system: str
    num_executors: str
    memory: str
    java_version: str


class AgentAttributes(NodeAttributes):
    status: str


class ControllerAttributes(NodeAttributes):
    core_version: str


class PluginAttributes(CamelModel):
    name: str
    display_name: str
    version: str


class NodeRef(BaseModel):
    """A node known to the cluster; it may or may not have a live computer."""

    name: str


class PluginInfo(BaseModel):
    short_name: str
    display_name: Optional[str] = None
    version: Optional[str] = None


class MemoryUsage(BaseModel):
    """Physical memory record reported by the swap space monitor, in bytes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_physical_memory: int
    available_physical_memory: int


class OverviewConfig(CamelModel):
    overview_link: str = ""
    link_root: str = ""


class OverviewConfigUpdate(CamelModel):
    overview_link: Optional[str] = None

    @field_validator("overview_link", mode="before")
    @classmethod
    def normalize_link(cls, value):
        return "" if value is None else value


class LinkCheckResult(BaseModel):
    kind: Literal["ok", "error"]
    message: Optional[str] = None


class OverviewLink(CamelModel):
    icon_file_name: Optional[str] = None
    display_name: Optional[str] = None
    url_name: Optional[str] = None
