import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from configs.gazetteer import GAZETTEER
from wayfinder import config
from wayfinder.dialog_manager import DialogManager
from wayfinder.gazetteer import Gazetteer
from wayfinder.graph import FacilityGraph
from wayfinder.nlu import IntentClassifier
from wayfinder.resolver import EntityResolver
from wayfinder.sessions import NavigationSession, SessionStore

logger = logging.getLogger(__name__)


def load_graph(path: Path) -> FacilityGraph:
    with open(path, "r", encoding="utf-8") as f:
        return FacilityGraph.from_dict(json.load(f))


def build_dialog(map_path: Optional[Path] = None, sessions: Optional[SessionStore] = None) -> DialogManager:
    """Load the map and gazetteer once; fails fast if either is malformed."""
    graph = load_graph(map_path or config.MAP_PATH)
    resolver = EntityResolver(
        Gazetteer.from_rows(GAZETTEER),
        fuzzy_distance=config.FUZZY_DISTANCE,
        fuzzy_long_alias=config.FUZZY_LONG_ALIAS,
        number_window=config.NUMBER_WINDOW,
    )
    return DialogManager(
        graph,
        IntentClassifier(resolver),
        sessions or SessionStore(ttl_seconds=config.SESSION_TTL),
        step_scale=config.STEP_SCALE,
    )


config.configure_logging()

app = FastAPI(title="Wayfinder - indoor navigation assistant")

dialog = build_dialog()
sessions = dialog.sessions


class ParseRequest(BaseModel):
    text: str
    session_id: Optional[str] = None


class ParseResponse(BaseModel):
    intent: str
    confidence: float
    entities: Dict[str, Any]
    action: Dict[str, Any]


class RespondRequest(BaseModel):
    text: str
    session_id: Optional[str] = None


class RespondResponse(BaseModel):
    text: str
    actions: Dict[str, Any]
    session_id: str


class PositionRequest(BaseModel):
    x: float
    y: float
    floor: int


class PositionResponse(BaseModel):
    text: Optional[str]
    actions: Dict[str, Any]
    location: Optional[str]


class GateRequest(BaseModel):
    gate: str


class SessionResponse(BaseModel):
    session_id: str
    current_node_id: Optional[str]
    destination_node_id: Optional[str]
    route: List[str]
    user_gate: Optional[str]


@app.post("/v1/parse", response_model=ParseResponse)
def parse(req: ParseRequest):
    result = dialog.classifier.parse(req.text)
    session = sessions.get(req.session_id) if req.session_id else NavigationSession()
    action = dialog.classifier.classify(req.text, session)
    return ParseResponse(
        intent=result["intent"],
        confidence=result["confidence"],
        entities=result["entities"],
        action=action.to_dict(),
    )


@app.post("/v1/respond", response_model=RespondResponse)
def respond(req: RespondRequest):
    # ensure session
    session_id = req.session_id or sessions.create_session()
    try:
        response_text, actions = dialog.handle(session_id, req.text)
    except Exception as e:
        logger.exception("respond failed for session %s", session_id)
        raise HTTPException(status_code=500, detail=str(e))
    return RespondResponse(text=response_text, actions=actions, session_id=session_id)


@app.post("/v1/session/{session_id}/position", response_model=PositionResponse)
def update_position(session_id: str, req: PositionRequest):
    result = dialog.update_position(session_id, req.x, req.y, req.floor)
    text, actions = result if result is not None else (None, {})
    return PositionResponse(text=text, actions=actions, location=sessions.get(session_id).current_node_id)


@app.post("/v1/session/{session_id}/gate")
def set_gate(session_id: str, req: GateRequest):
    gate = dialog.set_gate(session_id, req.gate)
    if gate is None:
        raise HTTPException(status_code=422, detail=f"unknown gate: {req.gate}")
    return {"status": "ok", "session_id": session_id, "gate": gate}


@app.get("/v1/session/{session_id}", response_model=SessionResponse)
def get_session(session_id: str):
    if session_id not in sessions:
        raise HTTPException(status_code=404, detail="session not found")
    s = sessions.get(session_id)
    return SessionResponse(
        session_id=session_id,
        current_node_id=s.current_node_id,
        destination_node_id=s.destination_node_id,
        route=[n.id for n in s.active_path],
        user_gate=s.user_gate,
    )


@app.get("/v1/session/{session_id}/reset")
def reset_session(session_id: str):
    ok = sessions.reset(session_id)
    if not ok:
        raise HTTPException(status_code=404, detail="session not found")
    return {"status": "ok", "session_id": session_id}


if __name__ == "__main__":
    uvicorn.run("wayfinder.main:app", host="0.0.0.0", port=8000, reload=True)
