"""
wayfinder/actions.py
Tagged results of intent classification, consumed by the dialog manager.
"""
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Union

from wayfinder.graph import NodeType


class NearestTarget(str, Enum):
    """Navigation targets resolved by node type, not by name."""
    NEAREST_BATHROOM = "NEAREST_BATHROOM"
    NEAREST_EXIT = "NEAREST_EXIT"

    @property
    def node_type(self) -> NodeType:
        if self is NearestTarget.NEAREST_BATHROOM:
            return NodeType.BATHROOM
        return NodeType.EMERGENCY_EXIT

    @property
    def label(self) -> str:
        return "bathroom" if self is NearestTarget.NEAREST_BATHROOM else "exit"


class Action:
    kind = "action"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Enum):
                data[key] = value.value
        data["kind"] = self.kind
        return data


@dataclass(frozen=True)
class Navigate(Action):
    target: Union[str, NearestTarget]
    kind = "navigate"

    @property
    def is_nearest(self) -> bool:
        return isinstance(self.target, NearestTarget)


@dataclass(frozen=True)
class UpdateLocation(Action):
    target: str
    kind = "update_location"


@dataclass(frozen=True)
class GetDistance(Action):
    kind = "get_distance"


@dataclass(frozen=True)
class Localize(Action):
    kind = "localize"


@dataclass(frozen=True)
class Clarify(Action):
    question: str
    kind = "clarify"


@dataclass(frozen=True)
class Respond(Action):
    text: str
    arrived: bool = False
    kind = "respond"
