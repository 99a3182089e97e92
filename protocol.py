COMMAND_SEPARATOR = ":"
FIELD_SEPARATOR = ","

# Inbound command types
CREATE_ROOM = "CREATE_ROOM" # payload: name,password,width,height
JOIN_ROOM = "JOIN_ROOM" # payload: room_id,password
LIST_ROOMS = "LIST_ROOMS"
STATE = "STATE" # opaque payload, relayed
ATTACK = "ATTACK" # opaque payload, relayed
GAME_OVER = "GAME_OVER"

# Outbound messages
ROOM_CREATED_MSG = "ROOM_CREATED:{room_id}"
JOIN_SUCCESS_MSG = "JOIN_SUCCESS:{room_id}"
JOIN_FAILED_MSG = "JOIN_FAILED:{reason}"
OPPONENT_JOINED_MSG = "OPPONENT_JOINED:{label}"
GAME_START_MSG = "GAME_START:{width},{height}"
OPPONENT_STATE_MSG = "OPPONENT_STATE:{payload}"
GARBAGE_MSG = "GARBAGE:{payload}"
OPPONENT_GAME_OVER_MSG = "OPPONENT_GAME_OVER"
OPPONENT_DISCONNECTED_MSG = "OPPONENT_DISCONNECTED"
GAME_OVER_MSG = "GAME_OVER"

# Directory: ROOM_LIST:<id>|<name>|<has_password>|<occupants>;<id>|...;
ROOM_LIST_PREFIX = "ROOM_LIST:"
ROOM_LIST_ENTRY = "{room_id}|{name}|{has_password}|{occupant_count};"

SLOT_A_LABEL = "Player1"
SLOT_B_LABEL = "Player2"


def parse_frame(frame: str):
    """Split a frame into (type, payload) on the first separator only."""
    command, _, payload = frame.partition(COMMAND_SEPARATOR)
    return command, payload
