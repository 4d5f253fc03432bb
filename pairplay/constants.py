# World dimensions in world units; spawn points stay SPAWN_MARGIN away from the edges.
WORLD_WIDTH = 3072
WORLD_HEIGHT = 2046
SPAWN_MARGIN = 100

# Two players may open a private chat when they are at most this far apart.
PROXIMITY_RADIUS = 100.0

MAX_MESSAGE_LENGTH = 200
ROOM_HISTORY_LIMIT = 100

# Display colours handed out on connect.
COLOR_PALETTE: tuple[str, ...] = (
    "#ff6b6b",
    "#feca57",
    "#48dbfb",
    "#1dd1a1",
    "#5f27cd",
    "#ff9ff3",
    "#54a0ff",
    "#00d2d3",
)

# Sections of a shared space a client may overwrite.
SPACE_FIELDS = ("notes", "images", "dates", "pet", "sunflower")

# Companions every new space starts with.
INITIAL_PET = {"name": "Lovebug", "level": 3, "exp": 0, "mood": "Happy", "lastFed": 0}
INITIAL_SUNFLOWER = {
    "name": "Sunny",
    "level": 1,
    "exp": 0,
    "stage": "Seed",
    "lastWatered": 0,
    "lastFertilized": 0,
}

# Reasons delivered with ``chat-room-closed``.
REASON_PARTNER_LEFT = "Your chat partner left the chat"
REASON_PARTNER_DISCONNECTED = "Your chat partner disconnected"
REASON_SELF_LEFT = "You left the chat"

__all__ = [
    "WORLD_WIDTH",
    "WORLD_HEIGHT",
    "SPAWN_MARGIN",
    "PROXIMITY_RADIUS",
    "MAX_MESSAGE_LENGTH",
    "ROOM_HISTORY_LIMIT",
    "SPACE_FIELDS",
    "INITIAL_PET",
    "INITIAL_SUNFLOWER",
    "COLOR_PALETTE",
    "REASON_PARTNER_LEFT",
    "REASON_PARTNER_DISCONNECTED",
    "REASON_SELF_LEFT",
]
