"""
wayfinder/navigation.py
Route planning over the facility graph (A*) and the spoken instructions
generated from a planned route.
"""
import logging
import math
from typing import List, Optional

import networkx as nx

from wayfinder.graph import FacilityGraph, Node, NodeType, distance

logger = logging.getLogger(__name__)


def find_path(start_id: str, goal_id: str, graph: FacilityGraph) -> Optional[List[Node]]:
    """
    A* from `start_id` to `goal_id`. Edge cost and heuristic are both the
    straight-line distance; floors are only crossed through stairs/elevator
    edges, which the graph guarantees at load time.

    Returns None for unknown ids or when the goal cannot be reached.
    Equal f-scores are expanded in the order they were pushed.
    """
    start = graph.get(start_id)
    goal = graph.get(goal_id)
    if start is None or goal is None:
        logger.warning("Cannot plan %s -> %s: unknown node", start_id, goal_id)
        return None

    def heuristic(u, v):
        return distance(graph.node(u), graph.node(v))

    def weight(u, v, _data):
        return distance(graph.node(u), graph.node(v))

    try:
        ids = nx.astar_path(graph.graph, start.id, goal.id, heuristic=heuristic, weight=weight)
    except nx.NetworkXNoPath:
        logger.info("No path from %s to %s", start_id, goal_id)
        return None

    path = [graph.node(i) for i in ids]
    logger.debug("Path %s -> %s: %s", start_id, goal_id, " -> ".join(ids))
    return path


def path_length(path: List[Node]) -> float:
    if not path or len(path) < 2:
        return 0.0
    return sum(distance(a, b) for a, b in zip(path, path[1:]))


def find_nearest_of_type(source: Node, node_type: NodeType, graph: FacilityGraph) -> Optional[Node]:
    """Closest node of `node_type` on the source's floor, by direct distance."""
    candidates = [n for n in graph.nodes_of_type(node_type) if n.floor == source.floor]
    if not candidates:
        return None
    return min(candidates, key=lambda n: distance(source, n))


def find_nearest_reachable(source_id: str, node_type: NodeType, graph: FacilityGraph) -> Optional[List[Node]]:
    """
    Route to the closest reachable node of `node_type`. The same floor is tried
    first; if nothing there is reachable, every floor is considered and the
    shortest planned route wins.
    """
    source = graph.get(source_id)
    if source is None:
        return None

    nearest = find_nearest_of_type(source, node_type, graph)
    if nearest is not None:
        path = find_path(source.id, nearest.id, graph)
        if path is not None:
            return path

    best = None
    for candidate in graph.nodes_of_type(node_type):
        if nearest is not None and candidate.id == nearest.id:
            continue
        path = find_path(source.id, candidate.id, graph)
        if path is not None and (best is None or path_length(path) < path_length(best)):
            best = path
    return best


def direction(a: Node, b: Node) -> str:
    if a.x == b.x and a.y == b.y:
        return "nearby"
    angle = math.degrees(math.atan2(b.y - a.y, b.x - a.x))
    if -22.5 <= angle <= 22.5:
        return "right"
    if 22.5 < angle <= 67.5:
        return "up-right"
    if 67.5 < angle <= 112.5:
        return "up"
    if 112.5 < angle <= 157.5:
        return "up-left"
    if angle > 157.5 or angle < -157.5:
        return "left"
    if -157.5 <= angle < -112.5:
        return "down-left"
    if -112.5 <= angle < -67.5:
        return "down"
    return "down-right"


class InstructionGenerator:
    def generate(self, path: List[Node], graph: FacilityGraph) -> List[str]:
        instructions = []

        for i in range(len(path) - 1):
            current = path[i]
            nxt = path[i + 1]

            if nxt.floor != current.floor or graph.is_floor_transition(current.id, nxt.id):
                if nxt.floor > current.floor:
                    instructions.append(f"Take the stairs/elevator up to floor {nxt.floor}.")
                elif nxt.floor < current.floor:
                    instructions.append(f"Take the stairs/elevator down to floor {nxt.floor}.")
                else:
                    instructions.append(f"Go through {nxt.name}.")
            else:
                instructions.append(f"Head {direction(current, nxt)} towards {nxt.name}.")

        return instructions
