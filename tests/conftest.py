import json
from pathlib import Path

import pytest

from configs.gazetteer import GAZETTEER
from wayfinder.dialog_manager import DialogManager
from wayfinder.gazetteer import Gazetteer
from wayfinder.graph import Edge, FacilityGraph, Node, NodeType
from wayfinder.nlu import IntentClassifier
from wayfinder.resolver import EntityResolver
from wayfinder.sessions import SessionStore

MAP_PATH = Path(__file__).resolve().parents[1] / "configs" / "facility_map.json"


@pytest.fixture(scope="session")
def gazetteer():
    return Gazetteer.from_rows(GAZETTEER)


@pytest.fixture(scope="session")
def resolver(gazetteer):
    return EntityResolver(gazetteer)


@pytest.fixture(scope="session")
def classifier(resolver):
    return IntentClassifier(resolver)


@pytest.fixture
def terminal():
    with open(MAP_PATH, "r", encoding="utf-8") as f:
        return FacilityGraph.from_dict(json.load(f))


@pytest.fixture
def small_graph():
    # Entrance -> checkpoint stored one way only, plus an unreachable shop.
    nodes = [
        Node("E", "Main Entrance", NodeType.ENTRANCE, 0, 0, 1),
        Node("C1", "Security Checkpoint 1", NodeType.WAYPOINT, 10, 0, 1),
        Node("SHOP", "Duty Free", NodeType.WAYPOINT, 50, 50, 1),
    ]
    return FacilityGraph(nodes, [Edge("E", "C1", False)], name="small")


@pytest.fixture
def dialog(terminal, classifier):
    return DialogManager(terminal, classifier, SessionStore())
