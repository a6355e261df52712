"""
wayfinder/graph.py
Facility graph: nodes (points of interest, waypoints, stairs) and the edges
that connect them. The adjacency is a networkx Graph built once at load time,
so every stored edge can be walked in both directions.
"""
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

import networkx as nx
from pydantic import AliasChoices, BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class GraphError(Exception):
    """Raised when a facility graph is malformed."""


class NodeType(str, Enum):
    ENTRANCE = "ENTRANCE"
    GATE = "GATE"
    BATHROOM = "BATHROOM"
    EMERGENCY_EXIT = "EMERGENCY_EXIT"
    WAYPOINT = "WAYPOINT"
    STAIRS_ELEVATOR = "STAIRS_ELEVATOR"
    CONNECTION = "CONNECTION"


@dataclass(frozen=True)
class Node:
    id: str
    name: str
    type: NodeType
    x: float
    y: float
    floor: int


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    floor_transition: bool = False


def distance(a: Node, b: Node) -> float:
    """Straight-line distance on the map plane. The floor number has no weight."""
    return math.hypot(a.x - b.x, a.y - b.y)


# Schema of an already-parsed map document (the JSON loader lives outside).
class _NodeModel(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    type: NodeType
    x: float
    y: float
    floor: int


class _EdgeModel(BaseModel):
    source: str = Field(validation_alias=AliasChoices("from", "source"))
    target: str = Field(validation_alias=AliasChoices("to", "target"))
    floor_transition: bool = Field(
        default=False,
        validation_alias=AliasChoices("isFloorTransition", "floor_transition", "stairs"),
    )


class _MapModel(BaseModel):
    name: str = Field(default="facility", validation_alias=AliasChoices("name", "airportName"))
    nodes: List[_NodeModel]
    edges: List[_EdgeModel] = []


class FacilityGraph:
    def __init__(self, nodes: Iterable[Node], edges: Iterable[Edge], name: str = "facility"):
        self.name = name
        self._nodes: Dict[str, Node] = {}
        self._edges: List[Edge] = []
        self.graph = nx.Graph()

        for node in nodes:
            if node.id in self._nodes:
                raise GraphError(f"duplicate node id: {node.id}")
            self._nodes[node.id] = node
            self.graph.add_node(node.id, node=node)

        if not self._nodes:
            raise GraphError("a facility graph needs at least one node")

        for edge in edges:
            self._add_edge(edge)

        logger.info(
            "Loaded facility graph %r: %d nodes, %d edges, floors %s",
            self.name, len(self._nodes), self.graph.number_of_edges(), self.floors,
        )

    def _add_edge(self, edge: Edge) -> None:
        a = self._nodes.get(edge.source)
        b = self._nodes.get(edge.target)
        if a is None or b is None:
            missing = edge.source if a is None else edge.target
            raise GraphError(f"edge {edge.source} -> {edge.target} references unknown node {missing}")
        if a.floor != b.floor and not edge.floor_transition:
            raise GraphError(
                f"edge {edge.source} -> {edge.target} changes floor ({a.floor} -> {b.floor}) "
                "without being a stairs/elevator transition"
            )
        if self.graph.has_edge(a.id, b.id):
            # Same corridor declared twice (e.g. once per direction).
            data = self.graph.edges[a.id, b.id]
            data["floor_transition"] = data["floor_transition"] or edge.floor_transition
        else:
            self.graph.add_edge(a.id, b.id, floor_transition=edge.floor_transition)
        self._edges.append(edge)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FacilityGraph":
        try:
            doc = _MapModel.model_validate(data)
        except ValidationError as e:
            raise GraphError(f"invalid facility map: {e}") from e
        nodes = [Node(n.id, n.name, n.type, n.x, n.y, n.floor) for n in doc.nodes]
        edges = [Edge(e.source, e.target, e.floor_transition) for e in doc.edges]
        return cls(nodes, edges, name=doc.name)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges)

    @property
    def floors(self) -> List[int]:
        return sorted({n.floor for n in self._nodes.values()})

    def node(self, node_id: str) -> Node:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise GraphError(f"unknown node id: {node_id}") from None

    def get(self, node_id: Optional[str]) -> Optional[Node]:
        if node_id is None:
            return None
        return self._nodes.get(node_id)

    def neighbors(self, node_id: str) -> List[Node]:
        return [self._nodes[n] for n in self.graph.neighbors(node_id)]

    def is_floor_transition(self, a: str, b: str) -> bool:
        if not self.graph.has_edge(a, b):
            return False
        return bool(self.graph.edges[a, b]["floor_transition"])

    def nodes_of_type(self, node_type: NodeType) -> List[Node]:
        return [n for n in self._nodes.values() if n.type == node_type]

    def find_by_name(self, name: str, prefer_floor: Optional[int] = None) -> Optional[Node]:
        """
        Case-insensitive exact lookup on the canonical name. When several nodes
        share a name (the same staircase on two floors) the one on
        `prefer_floor` wins, otherwise the first declared.
        """
        wanted = " ".join(name.lower().split())
        matches = [n for n in self._nodes.values() if n.name.lower() == wanted]
        if not matches:
            return None
        if prefer_floor is not None:
            for n in matches:
                if n.floor == prefer_floor:
                    return n
        return matches[0]

    def closest_node(self, x: float, y: float, floor: int) -> Optional[Node]:
        """Snap a raw map position to the closest node on the same floor."""
        candidates = [n for n in self._nodes.values() if n.floor == floor]
        if not candidates:
            return None
        return min(candidates, key=lambda n: (n.x - x) ** 2 + (n.y - y) ** 2)
