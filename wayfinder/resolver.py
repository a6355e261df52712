"""
wayfinder/resolver.py
Turns an informal place reference ("security checkpoint second",
"gate b12", "lounje") into the canonical name used on the facility map.

Resolution order:
  1. normalize (lowercase, ordinal words -> digits)
  2. gate pattern ("gate a5", "a5") -> "Gate A5"
  3. longest exact alias contained in the text; numbered base types need a
     number right after the alias
  4. bounded edit distance (adjacent swaps count once) on word-aligned
     spans, fixed names only
"""
import logging
import re
from typing import List, Optional

import spacy
from rapidfuzz.distance import OSA

from wayfinder.gazetteer import Gazetteer, GazetteerEntry

logger = logging.getLogger(__name__)

ORDINALS = {
    "first": "1", "1st": "1",
    "second": "2", "2nd": "2",
    "third": "3", "3rd": "3",
    "fourth": "4", "4th": "4",
    "fifth": "5", "5th": "5",
    "sixth": "6", "6th": "6",
    "seventh": "7", "7th": "7",
    "eighth": "8", "8th": "8",
    "ninth": "9", "9th": "9",
    "tenth": "10", "10th": "10",
}

NUMBER_WORDS = {
    "one": "1", "two": "2", "three": "3", "four": "4", "five": "5",
    "six": "6", "seven": "7", "eight": "8", "nine": "9", "ten": "10",
}

_ORDINAL_RE = re.compile(r"\b(" + "|".join(sorted(ORDINALS, key=len, reverse=True)) + r")\b")

# "gate a5", "gate a 5", "gatea5", "a5"; "gates 12" must not match.
_GATE_RE = re.compile(r"\b(?:gate(?:\s+([a-z])\s?|([a-z]))|([a-z]))(\d{1,3})\b")

_NUMBER_AFTER_RE = re.compile(
    r"^[^\w]*(?:(?:number|num|no\.?)\s*)?(\d{1,3}|" + "|".join(NUMBER_WORDS) + r")\b"
)


class EntityResolver:
    def __init__(
        self,
        gazetteer: Gazetteer,
        fuzzy_distance: int = 1,
        fuzzy_long_alias: int = 8,
        number_window: int = 12,
    ):
        self.gazetteer = gazetteer
        self.fuzzy_distance = fuzzy_distance
        self.fuzzy_long_alias = fuzzy_long_alias
        self.number_window = number_window
        # Aliases go through the same normalization as the text ("first aid" -> "1 aid").
        self._by_length = sorted(
            (GazetteerEntry(self.normalize(e.alias), e.canonical, e.requires_number) for e in gazetteer),
            key=lambda e: -len(e.alias),
        )
        # Tokenizer only; no trained model is needed for span boundaries.
        self._nlp = spacy.blank("en")

    @staticmethod
    def normalize(text: str) -> str:
        lowered = " ".join((text or "").lower().split())
        return _ORDINAL_RE.sub(lambda m: ORDINALS[m.group(1)], lowered)

    def resolve(self, raw_text: str) -> Optional[str]:
        text = self.normalize(raw_text)
        if not text:
            return None

        gate = self._match_gate(text)
        if gate is not None:
            logger.debug("resolved %r as gate %s", raw_text, gate)
            return gate

        exact = self._match_exact(text)
        if exact is not None:
            entry, end = exact
            if not entry.requires_number:
                return entry.canonical
            number = self.number_after(text, end)
            if number is None:
                logger.debug("alias %r matched in %r without its number", entry.alias, raw_text)
                return None
            return f"{entry.canonical} {number}"

        return self._match_fuzzy(text)

    def number_after(self, text: str, end: int) -> Optional[str]:
        """Digit or number word directly following position `end`, if any."""
        window = text[end:end + self.number_window]
        m = _NUMBER_AFTER_RE.match(window)
        if m is None:
            return None
        token = m.group(1)
        return NUMBER_WORDS.get(token, token)

    def resolve_gate(self, raw_text: str) -> Optional[str]:
        """Gate code only ("b12" -> "Gate B12"); other place names give None."""
        return self._match_gate(self.normalize(raw_text))

    def _match_gate(self, text: str) -> Optional[str]:
        m = _GATE_RE.search(text)
        if m is None:
            return None
        letter = m.group(1) or m.group(2) or m.group(3)
        return f"Gate {letter.upper()}{m.group(4)}"

    def _match_exact(self, text: str):
        for entry in self._by_length:
            pos = text.find(entry.alias)
            if pos >= 0:
                return entry, pos + len(entry.alias)
        return None

    def _max_distance(self, alias: str) -> int:
        if len(alias) < 4:
            return 0
        if len(alias) >= self.fuzzy_long_alias:
            return self.fuzzy_distance + 1
        return self.fuzzy_distance

    def _match_fuzzy(self, text: str) -> Optional[str]:
        tokens = [t for t in self._nlp.make_doc(text) if not t.is_space]
        best: Optional[GazetteerEntry] = None
        best_distance = None
        for entry in self._by_length:
            limit = self._max_distance(entry.alias)
            if limit <= 0:
                continue
            d = self._span_distance(entry.alias, text, tokens, limit)
            if d is not None and (best_distance is None or d < best_distance):
                best, best_distance = entry, d

        if best is None:
            return None
        if best.requires_number:
            logger.debug("fuzzy match %r ignored: numbered base type", best.alias)
            return None
        logger.debug("fuzzy matched %r -> %s (distance %d)", text, best.canonical, best_distance)
        return best.canonical

    @staticmethod
    def _span_distance(alias: str, text: str, tokens: List, limit: int) -> Optional[int]:
        words = len(alias.split())
        best = None
        for size in range(max(1, words - 1), words + 2):
            for i in range(len(tokens) - size + 1):
                first, last = tokens[i], tokens[i + size - 1]
                start, end = first.idx, last.idx + len(last.text)
                if start > 0 and text[start - 1].isalnum():
                    continue
                if end < len(text) and text[end].isalnum():
                    continue
                candidate = " ".join(text[start:end].split())
                if abs(len(candidate) - len(alias)) > limit:
                    continue
                d = OSA.distance(alias, candidate, score_cutoff=limit)
                if d <= limit and (best is None or d < best):
                    best = d
        return best
