# (alias, canonical name, requires a trailing number)
# Equal-length aliases are tried in the order they are declared here.
GAZETTEER = [

    # =====================
    # entrances / exits
    # =====================
    ("main entrance", "Main Entrance", False),
    ("entrance", "Main Entrance", False),
    ("front door", "Main Entrance", False),
    ("emergency exit", "Emergency Exit", True),
    ("fire exit", "Emergency Exit", True),

    # =====================
    # security
    # =====================
    ("security checkpoint", "Security Checkpoint", True),
    ("security check", "Security Checkpoint", True),
    ("checkpoint", "Security Checkpoint", True),
    ("security", "Security Checkpoint", True),

    # =====================
    # facilities
    # =====================
    ("bathroom", "Bathroom", True),
    ("restroom", "Bathroom", True),
    ("toilet", "Bathroom", True),
    ("stairs", "Stairs", True),
    ("staircase", "Stairs", True),
    ("elevator", "Stairs", True),
    ("lift", "Stairs", True),
    ("information desk", "Information Desk", False),
    ("info desk", "Information Desk", False),
    ("help desk", "Information Desk", False),
    ("first aid", "First Aid Station", False),
    ("baggage claim", "Baggage Claim", False),
    ("luggage", "Baggage Claim", False),

    # =====================
    # shops / lounges
    # =====================
    ("duty free", "Duty Free", False),
    ("duty-free", "Duty Free", False),
    ("food court", "Food Court", False),
    ("restaurants", "Food Court", False),
    ("vip lounge", "VIP Lounge", False),
    ("lounge", "VIP Lounge", False),
]
