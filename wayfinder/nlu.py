import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple, Any

from configs import intents as intent_tables
from wayfinder.actions import (
    Action, Clarify, GetDistance, Localize, NearestTarget, Navigate, Respond, UpdateLocation,
)
from wayfinder.resolver import EntityResolver
from wayfinder.sessions import NavigationSession

logger = logging.getLogger(__name__)


class Intent(str, Enum):
    LOST = "lost"
    DISTANCE = "distance"
    NAVIGATE = "navigate"
    UPDATE_LOCATION = "update_location"
    CONFUSED = "confused"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class IntentMatch:
    intent: Intent
    trigger: Optional[str] = None
    # Text after the trigger, where the place reference is expected.
    remainder: str = ""


_MY_GATE_RE = re.compile(r"\bmy (?:flight'?s? )?gate\b")
_LEADING_FILLER_RE = re.compile(r"^(?:the|a|an|my|to|at|near|by|of)\s+")


def _phrase_re(phrase: str) -> re.Pattern:
    return re.compile(r"(?<!\w)" + re.escape(phrase) + r"(?!\w)")


class IntentClassifier:
    def __init__(
        self,
        resolver: EntityResolver,
        triggers: Optional[Dict[str, List[str]]] = None,
        priority: Optional[List[str]] = None,
        nearest_keywords: Optional[Dict[str, List[str]]] = None,
        help_text: str = intent_tables.HELP_TEXT,
    ):
        self.resolver = resolver
        self.help_text = help_text
        triggers = triggers or intent_tables.TRIGGERS
        priority = priority or intent_tables.PRIORITY

        # (intent, [(trigger, compiled)]) in priority order, longest trigger first.
        self._tables: List[Tuple[Intent, List[Tuple[str, re.Pattern]]]] = []
        for name in priority:
            phrases = sorted({" ".join(t.lower().split()) for t in triggers.get(name, [])}, key=len, reverse=True)
            self._tables.append((Intent(name), [(p, _phrase_re(p)) for p in phrases]))

        keywords = nearest_keywords or intent_tables.NEAREST_KEYWORDS
        self._nearest: List[Tuple[NearestTarget, List[re.Pattern]]] = [
            (NearestTarget.NEAREST_BATHROOM,
             [_phrase_re(k) for k in sorted(keywords.get("bathroom", []), key=len, reverse=True)]),
            (NearestTarget.NEAREST_EXIT,
             [_phrase_re(k) for k in sorted(keywords.get("exit", []), key=len, reverse=True)]),
        ]

    # ------------------------------------------------------------------
    # intent detection
    # ------------------------------------------------------------------
    def detect(self, text: str) -> IntentMatch:
        text_low = " ".join((text or "").lower().split())
        for intent, table in self._tables:
            for trigger, pattern in table:
                m = pattern.search(text_low)
                if m:
                    return IntentMatch(intent, trigger, text_low[m.end():].strip(" ?!.,"))
        return IntentMatch(Intent.UNKNOWN)

    def parse(self, text: str) -> Dict[str, Any]:
        """Intent plus extracted place, for inspection endpoints."""
        match = self.detect(text)
        entities: Dict[str, Any] = {}
        if match.intent in (Intent.NAVIGATE, Intent.UPDATE_LOCATION) and match.remainder:
            place = self.resolver.resolve(match.remainder)
            if place:
                entities["location"] = place
        return {
            "intent": match.intent.value,
            "confidence": 1.0 if match.intent != Intent.UNKNOWN else 0.0,
            "entities": entities,
            "raw_text": text,
        }

    # ------------------------------------------------------------------
    # classification
    # ------------------------------------------------------------------
    def classify(self, raw_text: str, session: NavigationSession) -> Action:
        match = self.detect(raw_text)
        logger.debug("detected %s (trigger=%r, remainder=%r)", match.intent.value, match.trigger, match.remainder)

        if match.intent == Intent.LOST:
            return Localize()
        if match.intent == Intent.DISTANCE:
            if not session.has_active_path:
                return Respond("You don't have an active route. Where do you want to go?")
            return GetDistance()
        if match.intent == Intent.NAVIGATE:
            return self._navigate(match.remainder, session)
        if match.intent == Intent.UPDATE_LOCATION:
            return self._update_location(match.remainder, session)
        if match.intent == Intent.CONFUSED:
            return self._next_step(session)
        return Respond(self.help_text)

    def _navigate(self, phrase: str, session: NavigationSession) -> Action:
        if not phrase:
            return Clarify("Sorry, where do you want to go?")

        if _MY_GATE_RE.search(phrase):
            if session.user_gate:
                return Navigate(session.user_gate)
            return Clarify("I don't have your gate information. Which gate are you looking for?")

        normalized = self.resolver.normalize(phrase)
        for sentinel, patterns in self._nearest:
            for pattern in patterns:
                m = pattern.search(normalized)
                # "bathroom 2" names a specific bathroom; leave it to the resolver.
                if m and self.resolver.number_after(normalized, m.end()) is None:
                    return Navigate(sentinel)

        target = self.resolver.resolve(phrase)
        if target is None:
            return Clarify(f"Sorry, I don't know where '{self._echo(phrase)}' is. Could you say it another way?")
        return Navigate(target)

    def _update_location(self, phrase: str, session: NavigationSession) -> Action:
        if not phrase:
            return Clarify("Sorry, where did you say you are?")
        target = self.resolver.resolve(phrase)
        if target is None:
            return Clarify(f"Sorry, I couldn't find a location matching '{self._echo(phrase)}'. Where are you?")
        if session.destination_name and target.lower() == session.destination_name.lower():
            return Respond(f"You have arrived at your destination: {session.destination_name}.", arrived=True)
        return UpdateLocation(target)

    @staticmethod
    def _next_step(session: NavigationSession) -> Action:
        if session.current_node_id is None:
            return Respond(
                "Tell me where you are, for example 'I am at the main entrance', and I will guide you."
            )
        if session.has_active_path and session.destination_name:
            return Respond(
                f"Keep following the route to {session.destination_name}. Ask me how far it is at any time."
            )
        if session.user_gate:
            return Respond(f"Your flight leaves from {session.user_gate}. Say 'take me to my gate' and I will guide you.")
        return Respond("Tell me where you would like to go, for example 'take me to the nearest bathroom'.")

    @staticmethod
    def _echo(phrase: str) -> str:
        return _LEADING_FILLER_RE.sub("", phrase).strip()
