from wayfinder.dialog_manager import DialogManager
from wayfinder.sessions import SessionStore


def _route(dialog, sid):
    return [n.id for n in dialog.sessions.get(sid).active_path]


def test_navigation_waits_for_location(dialog):
    sid = dialog.sessions.create_session()
    text, actions = dialog.handle(sid, "Take me to gate A5")
    assert text == "Okay, I can help you get to Gate A5. Where are you right now?"
    assert actions["clarify"] is True
    assert actions["action"] == {"kind": "navigate", "target": "Gate A5"}
    assert dialog.sessions.get(sid).pending_target == "Gate A5"

    text, actions = dialog.handle(sid, "I am at the main entrance")
    assert text.startswith("Okay, noted you are at Main Entrance. Okay, heading to Gate A5 on floor 2.")
    session = dialog.sessions.get(sid)
    assert session.current_node_id == "E1"
    assert session.destination_node_id == "GA5"
    assert session.pending_target is None
    assert actions["route"][0] == "E1" and actions["route"][-1] == "GA5"
    assert actions["steps"] == 26


def test_distance_and_arrival(dialog):
    sid = dialog.sessions.create_session()
    dialog.handle(sid, "I am at the entrance")
    dialog.handle(sid, "how do I get to gate a5")

    text, actions = dialog.handle(sid, "how far is it?")
    assert text == "You have approximately 26 steps remaining."
    assert actions["steps"] == 26

    text, actions = dialog.handle(sid, "I'm at gate A5")
    assert text == "You have arrived at your destination: Gate A5."
    assert actions["arrived"] is True
    session = dialog.sessions.get(sid)
    assert session.current_node_id == "GA5"
    assert not session.has_active_path
    assert session.destination_node_id is None


def test_location_update_replans(dialog):
    sid = dialog.sessions.create_session()
    dialog.handle(sid, "I am at the entrance")
    dialog.handle(sid, "take me to the duty free")

    text, actions = dialog.handle(sid, "I am at security checkpoint 2")
    assert text.startswith("Okay, noted you are at Security Checkpoint 2.")
    assert _route(dialog, sid)[0] == "SEC2"
    assert _route(dialog, sid)[-1] == "DF"


def test_position_drift_replans(dialog):
    sid = dialog.sessions.create_session()
    dialog.handle(sid, "I am at the entrance")
    dialog.handle(sid, "take me to gate a5")

    text, actions = dialog.update_position(sid, 148, -58, 1)
    assert text.startswith("It seems you are now at Bathroom 1.")
    assert actions["location"] == "B1"
    assert _route(dialog, sid)[0] == "B1"
    assert _route(dialog, sid)[-1] == "GA5"

    # same node again: nothing to say
    assert dialog.update_position(sid, 150, -60, 1) is None


def test_distance_off_route_replans(dialog):
    sid = dialog.sessions.create_session()
    dialog.handle(sid, "I am at the entrance")
    dialog.handle(sid, "take me to gate a5")
    dialog.sessions.update(sid, dialog.sessions.get(sid).with_location("BAG"))

    text, actions = dialog.handle(sid, "how far")
    assert text.startswith("Your current location is not on the calculated path.")
    assert _route(dialog, sid)[0] == "BAG"


def test_nearest_bathroom(dialog):
    sid = dialog.sessions.create_session()
    dialog.handle(sid, "I am at security checkpoint 1")
    text, actions = dialog.handle(sid, "where is the nearest restroom")
    assert text.startswith("The nearest bathroom is Bathroom 1.")
    assert actions["destination"] == "B1"
    assert actions["action"] == {"kind": "navigate", "target": "NEAREST_BATHROOM"}


def test_my_gate(dialog):
    sid = dialog.sessions.create_session()
    assert dialog.set_gate(sid, "b12") == "Gate B12"
    dialog.handle(sid, "I am at the entrance")
    text, actions = dialog.handle(sid, "take me to my gate")
    assert actions["destination"] == "GB12"


def test_gate_rejects_other_places(dialog):
    sid = dialog.sessions.create_session()
    assert dialog.set_gate(sid, "food court") is None
    assert dialog.sessions.get(sid).user_gate is None


def test_unknown_and_unreachable_targets(small_graph, classifier):
    dialog = DialogManager(small_graph, classifier, SessionStore())
    sid = dialog.sessions.create_session()
    dialog.handle(sid, "I am at the entrance")
    dialog.handle(sid, "take me to security checkpoint 1")
    assert _route(dialog, sid) == ["E", "C1"]

    text, _ = dialog.handle(sid, "take me to gate a5")
    assert text == "Sorry, I couldn't find 'Gate A5' on the map."

    text, actions = dialog.handle(sid, "take me to the duty free")
    assert text == "Sorry, I could not find a path to Duty Free."
    assert actions["route"] is None
    session = dialog.sessions.get(sid)
    assert not session.has_active_path
    assert session.destination_node_id is None


def test_already_there(dialog):
    sid = dialog.sessions.create_session()
    dialog.handle(sid, "I am at the lounge")
    text, actions = dialog.handle(sid, "take me to the vip lounge")
    assert text == "You are already at VIP Lounge."


def test_localize(dialog):
    sid = dialog.sessions.create_session()
    text, _ = dialog.handle(sid, "where am I")
    assert text.startswith("I don't have your current position.")

    dialog.sessions.update(sid, dialog.sessions.get(sid).with_position(395, 45, 2))
    text, actions = dialog.handle(sid, "I am lost")
    assert text == "It seems you are now at Departures Hall."
    assert actions["location"] == "DEP"


def test_clarify_and_help(dialog):
    sid = dialog.sessions.create_session()
    text, actions = dialog.handle(sid, "take me to the moon")
    assert "'moon'" in text
    assert actions["clarify"] is True
    text, _ = dialog.handle(sid, "sing me a song")
    assert text.startswith("Sorry, I didn't understand that.")
