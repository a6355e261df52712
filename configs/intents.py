# Trigger phrases per intent, matched by containment on the lowercased
# utterance. Categories are checked in PRIORITY order; inside a category the
# longest trigger found wins.

PRIORITY = ["lost", "distance", "navigate", "update_location", "confused"]

TRIGGERS = {

    # =====================
    # lost
    # =====================
    "lost": [
        "i am lost",
        "i'm lost",
        "im lost",
        "where am i",
        "i got lost",
        "i don't know where i am",
    ],

    # =====================
    # distance
    # =====================
    "distance": [
        "how far",
        "distance left",
        "how much further",
        "how much farther",
        "how many steps",
        "how long until",
        "are we there yet",
    ],

    # =====================
    # navigate
    # =====================
    "navigate": [
        "how do i get to",
        "how can i get to",
        "take me to",
        "bring me to",
        "guide me to",
        "go to",
        "where is",
        "where's",
        "where are",
        "navigate to",
        "directions to",
        "way to",
        "i need to get to",
        "i want to go to",
        "i need a",
        "i need the",
        "find the",
        "find a",
    ],

    # =====================
    # update_location
    # =====================
    "update_location": [
        "i am at",
        "i'm at",
        "im at",
        "i am now at",
        "i'm now at",
        "i am near",
        "i'm near",
        "i am next to",
        "i'm next to",
        "i am in front of",
        "i'm in front of",
        "i am by",
        "i'm by",
        "i just passed",
        "i arrived at",
        "my location is",
    ],

    # =====================
    # confused
    # =====================
    "confused": [
        "what now",
        "what next",
        "what's next",
        "what do i do",
        "what should i do",
        "where do i go",
        "where should i go",
        "next step",
        "i'm confused",
        "i am confused",
    ],
}

# Navigation targets answered with the closest node of a type instead of a name.
NEAREST_KEYWORDS = {
    "bathroom": ["bathroom", "restroom", "toilet", "toilets", "washroom", "wc", "loo", "lavatory"],
    "exit": ["emergency exit", "fire exit", "exit", "way out"],
}

HELP_TEXT = (
    "Sorry, I didn't understand that. Can you please rephrase? You can ask me how to get "
    "somewhere, tell me where you are, or ask how far your destination is."
)
