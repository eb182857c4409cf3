# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
Playback selection - answers "what do I play for this pitch and velocity?".

Everything a player needs is computed when it is built. `play()` only copies
cached values into a caller-owned VoicePlayInfo; it never raises, and a miss
is reported as `info.valid = False`.

Players:
- SimpleVoicePlayer: exactly one region
- NullVoicePlayer: nothing matches
- RandomVoicePlayer: weighted-random choice by lorand/hirand
- RoundRobinVoicePlayer: cycles through regions in seq_position order
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .constants import DEFAULT_AMPEG_RELEASE, MIDI_MAX
from .region import CompiledRegion

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class VoicePlayParameter:
    """Input to play(). A velocity of 0 is note-off and never plays."""
    midi_pitch: int = 0
    midi_velocity: int = 0


@dataclass(slots=True)
class VoicePlayInfo:
    """Output of play()."""
    valid: bool = False
    sample_index: int = 0
    needs_transpose: bool = False
    transpose_amt: float = 1.0
    gain: float = 1.0
    ampeg_release: float = DEFAULT_AMPEG_RELEASE

    def can_play(self) -> bool:
        return self.valid and self.sample_index > 0


class CachedSamplerPlaybackInfo:
    """
    The part of a region needed to play one note, precomputed for the pitch
    that will trigger it.
    """

    __slots__ = ("sample_index", "needs_transpose", "transpose_amt", "ampeg_release", "amp_veltrack")

    def __init__(self, region: CompiledRegion, midi_pitch: int, sample_index: int):
        self.sample_index = sample_index

        keycenter = region.effective_keycenter()
        semi_offset = 0 if keycenter is None else midi_pitch - keycenter
        if semi_offset == 0:
            self.needs_transpose = False
            self.transpose_amt = 1.0
        else:
            self.needs_transpose = True
            self.transpose_amt = 2.0 ** (semi_offset / 12.0)

        self.ampeg_release = region.ampeg_release
        self.amp_veltrack = min(max(region.amp_veltrack, 0.0), 100.0)


def velocity_gain(midi_velocity: int, amp_veltrack: float) -> float:
    """
    Maps velocity to gain. amp_veltrack=100 follows velocity fully, 0 ignores
    it; the result is squared to approximate a loudness curve.
    """
    v = float(midi_velocity)
    t = amp_veltrack
    x = (v * t / 100.0) + (100.0 - t) * 127.0 / 100.0
    temp = x / 127.0
    return temp * temp


def cached_info_to_play_info(info: VoicePlayInfo, params: VoicePlayParameter, cached: CachedSamplerPlaybackInfo):
    if not 1 <= params.midi_velocity <= MIDI_MAX:
        info.valid = False
        return
    info.sample_index = cached.sample_index
    info.needs_transpose = cached.needs_transpose
    info.transpose_amt = cached.transpose_amt
    info.ampeg_release = cached.ampeg_release
    info.gain = velocity_gain(params.midi_velocity, cached.amp_veltrack)
    info.valid = True


class SamplerPlayback(ABC):
    """
    Common query interface for all players.
    """

    @abstractmethod
    def play(self, info: VoicePlayInfo, params: VoicePlayParameter):
        """
        Fills in `info` for one note-on.

        Args:
            info: Receives the result. `valid` is False on a miss.
            params: Pitch and velocity (1..127).
        """
        pass


class SimpleVoicePlayer(SamplerPlayback):

    def __init__(self, region: CompiledRegion, midi_pitch: int, sample_index: int):
        self.data = CachedSamplerPlaybackInfo(region, midi_pitch, sample_index)
        self.line_number = region.line_number

    def play(self, info: VoicePlayInfo, params: VoicePlayParameter):
        cached_info_to_play_info(info, params, self.data)

    def __repr__(self):
        return f"SimpleVoicePlayer(si={self.data.sample_index})"


class NullVoicePlayer(SamplerPlayback):
    """
    Plays nothing. Covers the "no region here" case without special-casing
    it in the caller.
    """

    def play(self, info: VoicePlayInfo, params: VoicePlayParameter):
        info.valid = False

    def __repr__(self):
        return "NullVoicePlayer()"


class _MultiRegionPlayer(SamplerPlayback):
    """
    Shared build-then-finalize life cycle. Entries may only be added before
    finalize(); play() only works after it.
    """

    def __init__(self):
        self._pending = []
        self._entries: list[CachedSamplerPlaybackInfo] = []
        self.finalized = False

    def add_entry(self, region: CompiledRegion, sample_index: int, midi_pitch: int):
        if self.finalized:
            raise RuntimeError(f"{type(self).__name__}: can't add entries after finalize")
        self._pending.append((region, CachedSamplerPlaybackInfo(region, midi_pitch, sample_index)))

    def finalize(self):
        if self.finalized:
            raise RuntimeError(f"{type(self).__name__} is already finalized")
        self._finalize_entries(self._pending)
        self._pending = []
        self.finalized = True

    @abstractmethod
    def _finalize_entries(self, pending):
        """Builds the read-only tables from (region, cached info) pairs."""
        pass

    def __len__(self):
        return len(self._entries) if self.finalized else len(self._pending)

    def __repr__(self):
        indices = [entry.sample_index for entry in self._entries]
        return f"{type(self).__name__}(si={indices})"


class RandomVoicePlayer(_MultiRegionPlayer):
    """
    Picks an entry at random.

    Only hirand is consulted. Each entry owns [previous entry's hirand,
    hirand) in insertion order, and lorand is ignored, so gaps and overlaps
    between lorand/hirand pairs are not honored. Entries are not sorted by
    hirand at finalize: an entry added after one with a higher hirand is
    swallowed by the earlier range and never plays. finalize() only logs a
    warning when it sees this. A draw at or above the last hirand is a miss.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None):
        super().__init__()
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._hirand: list[float] = []

    def _finalize_entries(self, pending):
        previous = float("-inf")
        for region, cached in pending:
            if region.hirand < previous:
                logger.warning(
                    "random regions out of order: hirand=%s after %s (line %d)",
                    region.hirand, previous, region.line_number + 1
                )
            previous = region.hirand
            self._entries.append(cached)
            self._hirand.append(region.hirand)

    def play(self, info: VoicePlayInfo, params: VoicePlayParameter):
        info.valid = False
        if not self.finalized or not self._entries:
            return

        draw = self._rng.random()
        for i, hirand in enumerate(self._hirand):
            if draw < hirand:
                cached_info_to_play_info(info, params, self._entries[i])
                return


class RoundRobinVoicePlayer(_MultiRegionPlayer):
    """
    Cycles through its entries in seq_position order. The cursor is shared by
    every query, so concurrent callers must serialize.
    """

    def __init__(self):
        super().__init__()
        self._current_entry = 0

    def _finalize_entries(self, pending):
        ordered = sorted(pending, key=lambda item: item[0].seq_position)
        self._entries = [cached for _, cached in ordered]

    def play(self, info: VoicePlayInfo, params: VoicePlayParameter):
        info.valid = False
        if not self.finalized or not self._entries:
            return

        entry = self._entries[self._current_entry]
        self._current_entry = (self._current_entry + 1) % len(self._entries)
        cached_info_to_play_info(info, params, entry)
