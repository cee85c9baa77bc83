from enum import Enum
from typing import Any, Callable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

FILE_SYSTEM_CHANGED = "FILE_SYSTEM_CHANGED"


class WireModel(BaseModel):
    """Immutable model serialized with camelCase keys for the transport."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class EventKind(str, Enum):
    ADD = "add"
    CHANGE = "change"
    UNLINK = "unlink"
    ADD_DIR = "addDir"
    UNLINK_DIR = "unlinkDir"
    ERROR = "error"
    READY = "ready"


class StatSnapshot(WireModel):
    path: str
    root: str = ""
    directory: str = ""
    base_name: str = ""
    name: str = ""
    extension: str = ""
    is_directory: bool
    is_file: bool
    is_symbolic_link: bool
    size: int = 0
    modified_time: float = 0.0
    accessed_time: float = 0.0
    changed_time: float = 0.0
    mode: int = 0
    ino: int = 0
    dev: int = 0
    nlink: int = 0
    uid: int = 0
    gid: int = 0


class DirectoryListing(WireModel):
    path: str
    entries: List[StatSnapshot] = Field(default_factory=list)


class ChangeEvent(WireModel):
    type: Literal["FILE_SYSTEM_CHANGED"] = FILE_SYSTEM_CHANGED
    event_kind: EventKind
    path: str
    details: Optional[StatSnapshot] = None


class NoDetail(BaseModel):
    """Raw watch payload carried nothing stat-like."""

    kind: Literal["none"] = "none"


class WithDetail(BaseModel):
    """Raw watch payload resolved to a snapshot."""

    kind: Literal["detail"] = "detail"
    snapshot: StatSnapshot


DetailClassification = Union[NoDetail, WithDetail]


class BaseCommand(BaseModel):
    command_name: str
    description: str = Field(default="")
    command_params: dict[str, Any] = Field(default_factory=dict)

    params_model: Any = Field(default=None, exclude=True)
    func: Optional[Callable[..., Any]] = Field(default=None, exclude=True)

    def invoke(self, payload: Optional[dict[str, Any]] = None) -> Any:
        """Validate ``payload`` against the parameter model and call the command."""
        arguments = self.params_model.model_validate(payload or {})
        return self.func(**dict(arguments))  # type: ignore[misc]
