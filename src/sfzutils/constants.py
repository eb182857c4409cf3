# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
SFZ Constants - Opcode tables and defaults shared by the lexer, schema and players.
"""

from enum import Enum, auto


class Opcode(Enum):
    """Recognized instrument-definition keys. NONE stands for unrecognized text."""
    NONE = auto()
    HI_KEY = auto()
    LO_KEY = auto()
    KEY = auto()
    HI_VEL = auto()
    LO_VEL = auto()
    SAMPLE = auto()
    AMPEG_RELEASE = auto()
    LOOP_MODE = auto()
    PITCH_KEYCENTER = auto()
    LOOP_START = auto()
    LOOP_END = auto()
    PAN = auto()
    GROUP = auto()
    TRIGGER = auto()
    VOLUME = auto()
    TUNE = auto()
    OFFSET = auto()
    POLYPHONY = auto()
    PITCH_KEYTRACK = auto()
    AMP_VELTRACK = auto()
    LO_RAND = auto()
    HI_RAND = auto()
    SEQ_LENGTH = auto()
    SEQ_POSITION = auto()
    DEFAULT_PATH = auto()
    SW_LABEL = auto()
    SW_LAST = auto()
    SW_LOKEY = auto()
    SW_HIKEY = auto()
    SW_DEFAULT = auto()
    HICC64_HACK = auto()
    LOCC64_HACK = auto()


class OpcodeType(Enum):
    """How the text value of an opcode is converted."""
    INT = auto()
    FLOAT = auto()
    STRING = auto()
    DISCRETE = auto()
    UNKNOWN = auto()


class DiscreteValue(Enum):
    """Named loop and trigger modes."""
    NONE = auto()
    LOOP_CONTINUOUS = auto()
    LOOP_SUSTAIN = auto()
    NO_LOOP = auto()
    ONE_SHOT = auto()
    ATTACK = auto()
    RELEASE = auto()


# Mapping from opcode name to Opcode, one canonical name per opcode
OPCODES = {
    "hivel": Opcode.HI_VEL,
    "lovel": Opcode.LO_VEL,
    "hikey": Opcode.HI_KEY,
    "lokey": Opcode.LO_KEY,
    "hirand": Opcode.HI_RAND,
    "lorand": Opcode.LO_RAND,
    "pitch_keycenter": Opcode.PITCH_KEYCENTER,
    "ampeg_release": Opcode.AMPEG_RELEASE,
    "loop_mode": Opcode.LOOP_MODE,
    "loop_start": Opcode.LOOP_START,
    "loop_end": Opcode.LOOP_END,
    "sample": Opcode.SAMPLE,
    "pan": Opcode.PAN,
    "group": Opcode.GROUP,
    "trigger": Opcode.TRIGGER,
    "volume": Opcode.VOLUME,
    "tune": Opcode.TUNE,
    "offset": Opcode.OFFSET,
    "polyphony": Opcode.POLYPHONY,
    "pitch_keytrack": Opcode.PITCH_KEYTRACK,
    "amp_veltrack": Opcode.AMP_VELTRACK,
    "key": Opcode.KEY,
    "seq_length": Opcode.SEQ_LENGTH,
    "seq_position": Opcode.SEQ_POSITION,
    "default_path": Opcode.DEFAULT_PATH,
    "sw_label": Opcode.SW_LABEL,
    "sw_last": Opcode.SW_LAST,
    "sw_lokey": Opcode.SW_LOKEY,
    "sw_hikey": Opcode.SW_HIKEY,
    "sw_default": Opcode.SW_DEFAULT,
    "hicc64": Opcode.HICC64_HACK,
    "locc64": Opcode.LOCC64_HACK
}

# Reverse mapping from Opcode to name
OPCODE_NAMES = {opcode: name for name, opcode in OPCODES.items()}

OPCODE_TYPES = {
    Opcode.HI_KEY: OpcodeType.INT,
    Opcode.KEY: OpcodeType.INT,
    Opcode.LO_KEY: OpcodeType.INT,
    Opcode.HI_VEL: OpcodeType.INT,
    Opcode.LO_VEL: OpcodeType.INT,
    Opcode.SAMPLE: OpcodeType.STRING,
    Opcode.AMPEG_RELEASE: OpcodeType.FLOAT,
    Opcode.LOOP_MODE: OpcodeType.DISCRETE,
    Opcode.PITCH_KEYCENTER: OpcodeType.INT,
    Opcode.LOOP_START: OpcodeType.INT,
    Opcode.LOOP_END: OpcodeType.INT,
    Opcode.PAN: OpcodeType.INT,
    Opcode.GROUP: OpcodeType.INT,
    Opcode.TRIGGER: OpcodeType.DISCRETE,
    Opcode.VOLUME: OpcodeType.FLOAT,
    Opcode.TUNE: OpcodeType.INT,
    Opcode.OFFSET: OpcodeType.INT,
    Opcode.POLYPHONY: OpcodeType.INT,
    Opcode.PITCH_KEYTRACK: OpcodeType.INT,
    Opcode.AMP_VELTRACK: OpcodeType.FLOAT,
    Opcode.LO_RAND: OpcodeType.FLOAT,
    Opcode.HI_RAND: OpcodeType.FLOAT,
    Opcode.SEQ_LENGTH: OpcodeType.INT,
    Opcode.SEQ_POSITION: OpcodeType.INT,
    Opcode.DEFAULT_PATH: OpcodeType.STRING,
    Opcode.SW_LABEL: OpcodeType.STRING,
    Opcode.SW_LAST: OpcodeType.INT,
    Opcode.SW_LOKEY: OpcodeType.INT,
    Opcode.SW_HIKEY: OpcodeType.INT,
    Opcode.SW_DEFAULT: OpcodeType.INT,
    Opcode.HICC64_HACK: OpcodeType.INT,
    Opcode.LOCC64_HACK: OpcodeType.INT
}

DISCRETE_VALUES = {
    "loop_continuous": DiscreteValue.LOOP_CONTINUOUS,
    "loop_sustain": DiscreteValue.LOOP_SUSTAIN,
    "no_loop": DiscreteValue.NO_LOOP,
    "one_shot": DiscreteValue.ONE_SHOT,
    "attack": DiscreteValue.ATTACK,
    "release": DiscreteValue.RELEASE
}

# Pitch classes for note-name values such as "c#4"
NOTE_PITCH_CLASSES = {
    "c": 0,
    "d": 2,
    "e": 4,
    "f": 5,
    "g": 7,
    "a": 9,
    "b": 11
}

MIDI_MAX = 127

# -1 in a key field means "not set"
KEY_UNSET = -1

DEFAULT_LOVEL = 0
DEFAULT_HIVEL = 127
DEFAULT_AMPEG_RELEASE = .001
DEFAULT_AMP_VELTRACK = 100.0
DEFAULT_LORAND = 0.0
DEFAULT_HIRAND = 1.0

MAX_INCLUDE_DEPTH = 10
