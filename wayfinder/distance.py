import math
from typing import Optional, Sequence

from wayfinder.graph import Node
from wayfinder.navigation import path_length

# Map units per walking step.
STEP_SCALE = 25.0


class NoActiveRoute(Exception):
    pass


class LocationNotOnPath(Exception):
    def __init__(self, node_id: Optional[str]):
        super().__init__(f"location {node_id} is not on the active route")
        self.node_id = node_id


def remaining_steps(active_path: Optional[Sequence[Node]], current_node_id: Optional[str],
                    scale: float = STEP_SCALE) -> int:
    """Steps left from `current_node_id` to the end of `active_path`."""
    if not active_path:
        raise NoActiveRoute("there is no active route")
    index = next((i for i, n in enumerate(active_path) if n.id == current_node_id), None)
    if index is None:
        raise LocationNotOnPath(current_node_id)
    # Half rounds up: 37.5 units at scale 25 is 2 steps.
    return int(math.floor(path_length(list(active_path[index:])) / scale + 0.5))
