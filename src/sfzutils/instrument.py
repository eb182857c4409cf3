# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
SFZ Instrument - Compiles instrument-definition text into regions and the
per-pitch player tables used at note-on time.

This tool runs the whole pipeline:
- lexer: text to tokens
- parser: tokens to one key/value list per region
- schema: key/value text to typed values
- players: per pitch, per velocity layer
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from .constants import MIDI_MAX, DiscreteValue
from .lexer import IncludeHandler, lex
from .parser import parse, region_key_values
from .playback import (
    NullVoicePlayer,
    RandomVoicePlayer,
    RoundRobinVoicePlayer,
    SamplerPlayback,
    SimpleVoicePlayer,
    VoicePlayInfo,
    VoicePlayParameter,
)
from .region import CompiledRegion
from .schema import SamplerErrorContext, compile_key_values

logger = logging.getLogger(__name__)


def compile_regions(text: str, err: SamplerErrorContext,
                    include_handler: Optional[IncludeHandler] = None) -> list[CompiledRegion]:
    """
    Compiles SFZ text into regions.

    Regions that fail validation are skipped and reported in `err`.

    Raises:
        SfzLexError: The text can't be lexed.
        SfzParseError: The tokens don't form key=value pairs.
    """
    tokens = lex(text, include_handler)
    regions = []
    for source in region_key_values(parse(tokens)):
        values = compile_key_values(err, source.pairs)
        try:
            regions.append(CompiledRegion.from_keys_and_values(values, source.line))
        except ValueError as e:
            message = f"line {source.line + 1}: {e}"
            err.region_errors.append(message)
            logger.warning("skipping region at %s", message)
    return regions


class CompiledInstrument:
    """
    Regions plus a lookup table from pitch to velocity layers to players.
    Built once; after that only RoundRobinVoicePlayer cursors change.
    """

    def __init__(self, regions, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None):
        """
        Initializes the instrument.

        Args:
            regions: CompiledRegions in source order.
            rng: Random generator for weighted-random layers.
            seed: Seed for a new generator if `rng` is not given.
        """
        self.regions = list(regions)
        self._rng = rng if rng is not None else np.random.default_rng(seed)
        self._null_player = NullVoicePlayer()

        # Sample index 0 means "no sample", so indices start at 1
        self.sample_files: list[str] = []
        self._sample_indices: dict[str, int] = {}
        for region in self.regions:
            if region.sample_file and region.sample_file not in self._sample_indices:
                self.sample_files.append(region.sample_file)
                self._sample_indices[region.sample_file] = len(self.sample_files)

        # pitch -> [(lovel, hivel, player), ...]
        self._layers: list[list[tuple[int, int, SamplerPlayback]]] = [
            self._build_layers(pitch) for pitch in range(MIDI_MAX + 1)
        ]

    @classmethod
    def from_text(cls, text: str, err: SamplerErrorContext,
                  include_handler: Optional[IncludeHandler] = None,
                  seed: Optional[int] = None) -> CompiledInstrument:
        return cls(compile_regions(text, err, include_handler), seed=seed)

    def sample_index(self, region: CompiledRegion) -> int:
        return self._sample_indices.get(region.sample_file, 0)

    def sample_file(self, sample_index: int) -> Optional[str]:
        if 1 <= sample_index <= len(self.sample_files):
            return self.sample_files[sample_index - 1]
        return None

    def _build_layers(self, pitch: int):
        groups: dict[tuple[int, int], list[CompiledRegion]] = {}
        for region in self.regions:
            if not region.sample_file or region.trigger == DiscreteValue.RELEASE:
                continue
            if region.matches_pitch(pitch):
                groups.setdefault((region.lovel, region.hivel), []).append(region)

        return [(lovel, hivel, self._make_player(pitch, members))
                for (lovel, hivel), members in groups.items()]

    def _make_player(self, pitch: int, members: list[CompiledRegion]) -> SamplerPlayback:
        if len(members) == 1:
            region = members[0]
            return SimpleVoicePlayer(region, pitch, self.sample_index(region))

        if any(region.has_seq_position for region in members):
            player = RoundRobinVoicePlayer()
        elif any(region.has_random_range for region in members):
            player = RandomVoicePlayer(rng=self._rng)
        else:
            region = members[0]
            logger.warning(
                "%d regions overlap at pitch %d, velocity %d-%d; using line %d",
                len(members), pitch, region.lovel, region.hivel, region.line_number + 1
            )
            return SimpleVoicePlayer(region, pitch, self.sample_index(region))

        for region in members:
            player.add_entry(region, self.sample_index(region), pitch)
        player.finalize()
        return player

    def player_for(self, midi_pitch: int, midi_velocity: int) -> SamplerPlayback:
        if not 0 <= midi_pitch <= MIDI_MAX:
            return self._null_player
        for lovel, hivel, player in self._layers[midi_pitch]:
            if lovel <= midi_velocity <= hivel:
                return player
        return self._null_player

    def play(self, info: VoicePlayInfo, params: VoicePlayParameter):
        """
        Fills in `info` for one note-on; `info.valid` is False on a miss.
        """
        info.valid = False
        if not 1 <= params.midi_velocity <= MIDI_MAX:
            return
        self.player_for(params.midi_pitch, params.midi_velocity).play(info, params)
