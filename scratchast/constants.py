"""Constants shared by the decoder and the resolver."""

from typing import Dict, FrozenSet

PROJECT_DESCRIPTOR = "project.json"

# Input shadow markers (first element of every input tuple)
SHADOW_ONLY = 1
BLOCK_ONLY = 2
BLOCK_OVER_SHADOW = 3

# Input payload discriminants
LITERAL_TAGS: FrozenSet[int] = frozenset(range(4, 11))
BROADCAST_TAG = 11
VARIABLE_TAG = 12
LIST_TAG = 13

# Trigger hats that start a resolvable script
WHEN_FLAG_CLICKED = "event_whenflagclicked"
WHEN_KEY_PRESSED = "event_whenkeypressed"
WHEN_BROADCAST_RECEIVED = "event_whenbroadcastreceived"

TRIGGER_OPCODES: FrozenSet[str] = frozenset({
    WHEN_FLAG_CLICKED,
    WHEN_KEY_PRESSED,
    WHEN_BROADCAST_RECEIVED,
})

PROCEDURE_PROTOTYPE = "procedures_prototype"

# Field slots holding a [name, id] reference into a scope table
VARIABLE_FIELD = "VARIABLE"
LIST_FIELD = "LIST"
BROADCAST_FIELD = "BROADCAST_OPTION"
KEY_FIELD = "KEY_OPTION"

# Known extension opcode prefixes, as listed in project.json
EXTENSION_PREFIXES: Dict[str, str] = {
    "pen": "pen",
    "music": "music",
    "text2speech": "text2speech",
    "translate": "translate",
    "videoSensing": "videoSensing",
    "ev3": "ev3",
    "microbit": "microbit",
    "wedo2": "wedo2",
    "makeymakey": "makeymakey",
    "boost": "boost",
    "gdxfor": "gdxfor",
}

DEFAULT_WORKERS = 1
