"""
wayfinder/dialog_manager.py
Executes classified actions against the navigation session: plans routes,
records the user's location, answers distance questions and handles the
positioning stream. Every failure ends as a spoken reply, never an exception.
"""
import logging
from typing import Any, Dict, Optional, Tuple

from wayfinder.actions import (
    Action, Clarify, GetDistance, Localize, NearestTarget, Navigate, Respond, UpdateLocation,
)
from wayfinder.distance import STEP_SCALE, LocationNotOnPath, NoActiveRoute, remaining_steps
from wayfinder.graph import FacilityGraph, Node
from wayfinder.navigation import InstructionGenerator, find_nearest_reachable, find_path
from wayfinder.nlu import IntentClassifier
from wayfinder.sessions import SessionStore

logger = logging.getLogger(__name__)

Reply = Tuple[str, Dict[str, Any]]


class DialogManager:
    def __init__(
        self,
        graph: FacilityGraph,
        classifier: IntentClassifier,
        sessions: SessionStore,
        step_scale: float = STEP_SCALE,
    ):
        self.graph = graph
        self.classifier = classifier
        self.sessions = sessions
        self.step_scale = step_scale
        self.instructions = InstructionGenerator()

    # ------------------------------------------------------------------
    # entry points
    # ------------------------------------------------------------------
    def handle(self, session_id: str, text: str) -> Reply:
        with self.sessions.transaction(session_id) as tx:
            action = self.classifier.classify(text, tx.session)
            logger.info("[%s] %r -> %s", session_id, text, action.to_dict())
            reply, actions = self.execute(tx, action)
            actions["action"] = action.to_dict()
            return reply, actions

    def update_position(self, session_id: str, x: float, y: float, floor: int) -> Optional[Reply]:
        """
        Position fix from the positioning stream. Returns a reply only when the
        fix moves the user to another node.
        """
        with self.sessions.transaction(session_id) as tx:
            tx.session = tx.session.with_position(x, y, floor)
            node = self.graph.closest_node(x, y, floor)
            if node is None:
                logger.warning("[%s] no node on floor %s near (%s, %s)", session_id, floor, x, y)
                return None
            if node.id == tx.session.current_node_id:
                return None
            logger.debug("[%s] position snapped to %s (%s)", session_id, node.id, node.name)
            return self._set_location(tx, node, detected=True)

    def set_gate(self, session_id: str, gate_text: str) -> Optional[str]:
        gate = self.classifier.resolver.resolve_gate(gate_text)
        if gate is None:
            return None
        with self.sessions.transaction(session_id) as tx:
            tx.session = tx.session.with_gate(gate)
        return gate

    def execute(self, tx, action: Action) -> Reply:
        if isinstance(action, Navigate):
            return self._navigate(tx, action)
        if isinstance(action, UpdateLocation):
            return self._update_location(tx, action)
        if isinstance(action, GetDistance):
            return self._distance(tx)
        if isinstance(action, Localize):
            return self._localize(tx)
        if isinstance(action, Clarify):
            return action.question, {"clarify": True}
        if isinstance(action, Respond):
            if action.arrived:
                session = tx.session
                if session.destination_node_id:
                    session = session.with_location(session.destination_node_id)
                tx.session = session.cleared_route()
                return action.text, {"arrived": True}
            return action.text, {}
        logger.warning("Unknown action: %r", action)
        return "Sorry, I encountered an unexpected request.", {}

    # ------------------------------------------------------------------
    # handlers
    # ------------------------------------------------------------------
    def _navigate(self, tx, action: Navigate) -> Reply:
        start = self.graph.get(tx.session.current_node_id)
        if start is None:
            tx.session = tx.session.with_pending(action.target)
            label = action.target.label if action.is_nearest else action.target
            return f"Okay, I can help you get to {label}. Where are you right now?", {"clarify": True}
        return self._plan_to_target(tx, start, action.target)

    def _update_location(self, tx, action: UpdateLocation) -> Reply:
        current = self.graph.get(tx.session.current_node_id)
        node = self.graph.find_by_name(action.target, prefer_floor=current.floor if current else None)
        if node is None:
            return f"Sorry, I couldn't find a location matching '{action.target}' on the map.", {}
        return self._set_location(tx, node)

    def _distance(self, tx) -> Reply:
        session = tx.session
        try:
            steps = remaining_steps(session.active_path, session.current_node_id, self.step_scale)
        except NoActiveRoute:
            return "There is no active route to measure distance for.", {}
        except LocationNotOnPath:
            start = self.graph.get(session.current_node_id)
            destination = self.graph.get(session.destination_node_id)
            if start is None or destination is None:
                return "Your current location is not on the calculated path.", {}
            text, actions = self._plan(tx, start, destination)
            return "Your current location is not on the calculated path. " + text, actions
        return f"You have approximately {steps} steps remaining.", {"steps": steps}

    def _localize(self, tx) -> Reply:
        session = tx.session
        if session.last_position is None:
            known = self.graph.get(session.current_node_id)
            if known is not None:
                return f"I don't have a position fix, but you last told me you were at {known.name}.", {}
            return "I don't have your current position. Tell me where you are, for example 'I am at gate A5'.", {}
        x, y, floor = session.last_position
        node = self.graph.closest_node(x, y, floor)
        if node is None:
            return "Sorry, I couldn't place you on the map.", {}
        return self._set_location(tx, node, detected=True)

    # ------------------------------------------------------------------
    # shared steps
    # ------------------------------------------------------------------
    def _set_location(self, tx, node: Node, detected: bool = False) -> Reply:
        previous = self.graph.get(tx.session.current_node_id)
        session = tx.session.with_location(node.id)
        tx.session = session

        if session.destination_node_id == node.id:
            tx.session = session.cleared_route()
            return f"You have arrived at your destination: {node.name}.", {"arrived": True, "location": node.id}

        if detected:
            text = f"It seems you are now at {node.name}."
        elif previous is not None and previous.floor != node.floor:
            text = f"Okay, you are at {node.name} on floor {node.floor}."
        else:
            text = f"Okay, noted you are at {node.name}."

        # The old route started elsewhere; it is replaced, never reused.
        destination = self.graph.get(session.destination_node_id)
        if destination is not None:
            reply, actions = self._plan(tx, node, destination)
            return f"{text} {reply}", dict(actions, location=node.id)

        if session.pending_target is not None:
            reply, actions = self._plan_to_target(tx, node, session.pending_target)
            return f"{text} {reply}", dict(actions, location=node.id)

        return text, {"location": node.id}

    def _plan_to_target(self, tx, start: Node, target) -> Reply:
        if isinstance(target, NearestTarget):
            path = find_nearest_reachable(start.id, target.node_type, self.graph)
            if path is None:
                tx.session = tx.session.cleared_route().with_pending(None)
                return f"Sorry, I couldn't find a reachable {target.label} on the map.", {}
            destination = path[-1]
            text, actions = self._route(tx, start, destination, path)
            return f"The nearest {target.label} is {destination.name}. {text}", actions

        destination = self.graph.find_by_name(target, prefer_floor=start.floor)
        if destination is None:
            tx.session = tx.session.with_pending(None)
            return f"Sorry, I couldn't find '{target}' on the map.", {}
        return self._plan(tx, start, destination)

    def _plan(self, tx, start: Node, destination: Node) -> Reply:
        path = find_path(start.id, destination.id, self.graph)
        if path is None:
            tx.session = tx.session.cleared_route().with_pending(None)
            return f"Sorry, I could not find a path to {destination.name}.", {"route": None}
        return self._route(tx, start, destination, path)

    def _route(self, tx, start: Node, destination: Node, path) -> Reply:
        if len(path) == 1:
            tx.session = tx.session.cleared_route().with_pending(None)
            return f"You are already at {destination.name}.", {"arrived": True}

        tx.session = tx.session.with_route(path, destination)
        steps = remaining_steps(path, start.id, self.step_scale)
        instructions = self.instructions.generate(path, self.graph)
        if destination.floor != start.floor:
            intro = f"Okay, heading to {destination.name} on floor {destination.floor}."
        else:
            intro = f"Okay, calculating route to {destination.name}."
        logger.debug("route to %s: %d nodes, ~%d steps", destination.id, len(path), steps)
        return f"{intro} {instructions[0]}", {
            "route": [n.id for n in path],
            "destination": destination.id,
            "instructions": instructions,
            "steps": steps,
        }
