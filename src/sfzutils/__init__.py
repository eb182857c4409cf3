# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

from .instrument import CompiledInstrument, compile_regions
from .lexer import SfzLexError, SfzLexer, Token, TokenKind, lex
from .parser import SfzParseError, SfzParser, parse, region_key_values
from .playback import (
    NullVoicePlayer,
    RandomVoicePlayer,
    RoundRobinVoicePlayer,
    SimpleVoicePlayer,
    VoicePlayInfo,
    VoicePlayParameter,
)
from .region import CompiledRegion
from .schema import SamplerErrorContext, compile_key_values

__all__ = [
    "CompiledInstrument",
    "CompiledRegion",
    "NullVoicePlayer",
    "RandomVoicePlayer",
    "RoundRobinVoicePlayer",
    "SamplerErrorContext",
    "SfzLexError",
    "SfzLexer",
    "SfzParseError",
    "SfzParser",
    "SimpleVoicePlayer",
    "Token",
    "TokenKind",
    "VoicePlayInfo",
    "VoicePlayParameter",
    "compile_key_values",
    "compile_regions",
    "lex",
    "parse",
    "region_key_values"
]
