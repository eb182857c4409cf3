# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
Opcode schema - type-directed conversion of SFZ key/value text.

Unknown opcodes and unconvertible values are skipped one pair at a time and
recorded in a caller-owned SamplerErrorContext; the rest of the list still
compiles.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from .constants import (
    DISCRETE_VALUES,
    NOTE_PITCH_CLASSES,
    OPCODE_TYPES,
    OPCODES,
    DiscreteValue,
    Opcode,
    OpcodeType,
)

logger = logging.getLogger(__name__)

_INT_PATTERN = re.compile(r"[+-]?\d+")
_FLOAT_PATTERN = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


@dataclass
class SamplerErrorContext:
    """
    Diagnostics gathered during one compilation pass.

    These are for display only; nothing in the package branches on them.
    """
    unrecognized_opcodes: set[str] = field(default_factory=set)
    bad_values: set[str] = field(default_factory=set)
    region_errors: list[str] = field(default_factory=list)

    def has_errors(self) -> bool:
        return bool(self.unrecognized_opcodes or self.bad_values or self.region_errors)

    def messages(self) -> list[str]:
        """
        Renders the collected diagnostics as display lines.
        """
        lines = [f"unrecognized opcode: {name}" for name in sorted(self.unrecognized_opcodes)]
        lines.extend(f"could not convert value: {pair}" for pair in sorted(self.bad_values))
        lines.extend(f"skipped region: {error}" for error in self.region_errors)
        return lines


@dataclass(frozen=True)
class Value:
    """
    A converted opcode value. `value` is an int, float, str or DiscreteValue
    according to `type`.
    """
    type: OpcodeType
    value: Union[int, float, str, DiscreteValue]


class KeysAndValues:
    """
    Compiled opcode -> Value mapping for one region. A later add of the same
    opcode replaces the earlier one.
    """

    def __init__(self):
        self._data: dict[Opcode, Value] = {}

    def add(self, opcode: Opcode, value: Value):
        self._data[opcode] = value

    def get(self, opcode: Opcode) -> Optional[Value]:
        return self._data.get(opcode)

    def __contains__(self, opcode) -> bool:
        return opcode in self._data

    def __len__(self) -> int:
        return len(self._data)


def translate(name: str, err: Optional[SamplerErrorContext] = None) -> Opcode:
    """
    Looks up an opcode by name.

    Args:
        name: The opcode text, e.g. "lokey".
        err: Receives the name if it is not recognized. Pass None to look up
            without reporting (the lexer does this).

    Returns:
        The Opcode, or Opcode.NONE for unknown text.
    """
    opcode = OPCODES.get(name)
    if opcode is not None:
        return opcode

    if err is not None and name not in err.unrecognized_opcodes:
        err.unrecognized_opcodes.add(name)
        logger.warning("unrecognized opcode %s", name)
    return Opcode.NONE


def translate_discrete(text: str) -> DiscreteValue:
    value = DISCRETE_VALUES.get(text)
    if value is None:
        logger.warning("isn't discrete: %s", text)
        return DiscreteValue.NONE
    return value


def key_text_to_type(name: str, err: Optional[SamplerErrorContext] = None) -> OpcodeType:
    """
    Returns the value type of the opcode named `name`, or OpcodeType.UNKNOWN.
    """
    opcode = translate(name, err)
    if opcode == Opcode.NONE:
        return OpcodeType.UNKNOWN
    return OPCODE_TYPES[opcode]


def convert_to_int(text: str) -> Optional[int]:
    """
    Converts an Int opcode value.

    Plain integers are used as-is. Note names are a lower case letter a-g, an
    optional "#" and an octave number, so "c4" is 60 and "a0" is 21.

    Returns:
        The integer, or None if the text can't be converted.
    """
    note = -1
    sharp = False
    rest = text

    if len(text) >= 2 and text[0] in NOTE_PITCH_CLASSES:
        note = NOTE_PITCH_CLASSES[text[0]]
        sharp = text[1] == "#"
        rest = text[2:] if sharp else text[1:]

    if not _INT_PATTERN.fullmatch(rest):
        return None

    x = int(rest)
    if note >= 0:
        # number part is the octave; 12 is c0 in midi
        x = x * 12 + 12 + note
        if sharp:
            x += 1
    return x


def convert_to_float(text: str) -> Optional[float]:
    """
    Converts a Float opcode value. Only plain decimal notation with an
    optional exponent is accepted; "nan", "inf" and anything that overflows
    to infinity give None.
    """
    if not _FLOAT_PATTERN.fullmatch(text):
        return None

    x = float(text)
    if not math.isfinite(x):
        return None
    return x


def compile_pair(err: SamplerErrorContext, results: KeysAndValues, key: str, value: str) -> bool:
    """
    Converts one key/value pair and adds it to `results`.

    Args:
        err: Diagnostics for this pass.
        results: Where the converted value goes.
        key: Opcode text.
        value: Value text.

    Returns:
        True if the pair was added, False if it was dropped.
    """
    opcode = translate(key, err)
    if opcode == Opcode.NONE:
        return False

    opcode_type = OPCODE_TYPES[opcode]
    if opcode_type == OpcodeType.INT:
        converted = convert_to_int(value)
    elif opcode_type == OpcodeType.FLOAT:
        converted = convert_to_float(value)
    elif opcode_type == OpcodeType.STRING:
        converted = value
    elif opcode_type == OpcodeType.DISCRETE:
        # an unmapped value is still recorded, as DiscreteValue.NONE
        converted = translate_discrete(value)
    else:
        raise AssertionError(f"no conversion for opcode type {opcode_type}")

    if converted is None:
        err.bad_values.add(f"{key}={value}")
        logger.warning("could not convert %s to %s. key=%s", value, opcode_type.name.lower(), key)
        return False

    results.add(opcode, Value(opcode_type, converted))
    return True


def compile_key_values(err: SamplerErrorContext, pairs: Iterable) -> KeysAndValues:
    """
    Compiles a region's key/value list.

    Args:
        err: Diagnostics for this pass, shared across regions so that each
            unknown name is reported once.
        pairs: (key, value) tuples or objects with `key` and `value`.

    Returns:
        The compiled KeysAndValues.
    """
    results = KeysAndValues()
    for pair in pairs:
        if isinstance(pair, tuple):
            key, value = pair
        else:
            key, value = pair.key, pair.value
        compile_pair(err, results, key, value)
    return results
