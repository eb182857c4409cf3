# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .constants import (
    DEFAULT_AMP_VELTRACK,
    DEFAULT_AMPEG_RELEASE,
    DEFAULT_HIRAND,
    DEFAULT_HIVEL,
    DEFAULT_LORAND,
    DEFAULT_LOVEL,
    KEY_UNSET,
    MIDI_MAX,
    DiscreteValue,
    Opcode,
)
from .schema import KeysAndValues


@dataclass(frozen=True)
class CompiledRegion:
    """
    One playable zone, read out of a compiled key/value mapping.

    lokey and hikey default to -1 rather than 0..127: a -1 bound is never a
    filter, so drum regions that only set `key` still match.
    """
    lokey: int = KEY_UNSET
    hikey: int = KEY_UNSET
    onlykey: int = KEY_UNSET
    keycenter: int = KEY_UNSET
    sample_file: str = ""
    lovel: int = DEFAULT_LOVEL
    hivel: int = DEFAULT_HIVEL
    ampeg_release: float = DEFAULT_AMPEG_RELEASE
    amp_veltrack: float = DEFAULT_AMP_VELTRACK
    lorand: float = DEFAULT_LORAND
    hirand: float = DEFAULT_HIRAND
    seq_position: int = KEY_UNSET
    seq_length: int = 1
    loop_mode: DiscreteValue = DiscreteValue.NONE
    trigger: DiscreteValue = DiscreteValue.ATTACK
    volume: float = 0.0
    pan: int = 0
    tune: int = 0
    line_number: int = 0

    def __post_init__(self):
        for name in ("lokey", "hikey", "onlykey", "keycenter"):
            key = getattr(self, name)
            if not KEY_UNSET <= key <= MIDI_MAX:
                raise ValueError(f"{name}={key} is out of range")
        if KEY_UNSET not in (self.lokey, self.hikey) and self.hikey < self.lokey:
            raise ValueError(f"hikey={self.hikey} is below lokey={self.lokey}")
        if not 0 <= self.lovel <= self.hivel <= MIDI_MAX:
            raise ValueError(f"bad velocity range lovel={self.lovel} hivel={self.hivel}")

    @classmethod
    def from_keys_and_values(cls, values: KeysAndValues, line_number: int = 0) -> CompiledRegion:
        """
        Builds a region. Opcodes missing from `values` keep their defaults.

        Raises:
            ValueError: The key or velocity bounds are inconsistent.
        """
        def read(opcode: Opcode, default):
            value = values.get(opcode)
            return default if value is None else value.value

        sample_file = read(Opcode.SAMPLE, "")
        default_path = read(Opcode.DEFAULT_PATH, "")
        if sample_file and default_path:
            sample_file = default_path + sample_file

        return cls(
            lokey=read(Opcode.LO_KEY, KEY_UNSET),
            hikey=read(Opcode.HI_KEY, KEY_UNSET),
            onlykey=read(Opcode.KEY, KEY_UNSET),
            keycenter=read(Opcode.PITCH_KEYCENTER, KEY_UNSET),
            sample_file=sample_file,
            lovel=read(Opcode.LO_VEL, DEFAULT_LOVEL),
            hivel=read(Opcode.HI_VEL, DEFAULT_HIVEL),
            ampeg_release=read(Opcode.AMPEG_RELEASE, DEFAULT_AMPEG_RELEASE),
            amp_veltrack=read(Opcode.AMP_VELTRACK, DEFAULT_AMP_VELTRACK),
            lorand=read(Opcode.LO_RAND, DEFAULT_LORAND),
            hirand=read(Opcode.HI_RAND, DEFAULT_HIRAND),
            seq_position=read(Opcode.SEQ_POSITION, KEY_UNSET),
            seq_length=read(Opcode.SEQ_LENGTH, 1),
            loop_mode=read(Opcode.LOOP_MODE, DiscreteValue.NONE),
            trigger=read(Opcode.TRIGGER, DiscreteValue.ATTACK),
            volume=read(Opcode.VOLUME, 0.0),
            pan=read(Opcode.PAN, 0),
            tune=read(Opcode.TUNE, 0),
            line_number=line_number,
        )

    def matches_pitch(self, midi_pitch: int) -> bool:
        # -1 bounds don't filter
        if self.onlykey != KEY_UNSET and midi_pitch != self.onlykey:
            return False
        if self.lokey != KEY_UNSET and midi_pitch < self.lokey:
            return False
        if self.hikey != KEY_UNSET and midi_pitch > self.hikey:
            return False
        return True

    def matches(self, midi_pitch: int, midi_velocity: int) -> bool:
        return self.matches_pitch(midi_pitch) and self.lovel <= midi_velocity <= self.hivel

    @property
    def has_random_range(self) -> bool:
        return (self.lorand, self.hirand) != (DEFAULT_LORAND, DEFAULT_HIRAND)

    @property
    def has_seq_position(self) -> bool:
        return self.seq_position != KEY_UNSET

    def effective_keycenter(self) -> Optional[int]:
        """The pitch that plays the sample unshifted, or None if unknown."""
        if self.keycenter != KEY_UNSET:
            return self.keycenter
        if self.onlykey != KEY_UNSET:
            return self.onlykey
        return None
