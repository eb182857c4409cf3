# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
SFZ Parser - Groups lexer tokens into headings of key/value pairs and
flattens the heading hierarchy into one key/value list per region.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .lexer import Token, TokenKind

logger = logging.getLogger(__name__)

# Outermost scope first. A heading resets every scope nested inside it.
SCOPE_HEADINGS = ("control", "global", "master", "group")
REGION_HEADING = "region"


class SfzParseError(ValueError):
    """The token stream does not form key=value pairs under headings."""


@dataclass(frozen=True)
class KeyValuePair:
    key: str
    value: str
    line: int


@dataclass
class Heading:
    name: str
    line: int
    pairs: list[KeyValuePair] = field(default_factory=list)


@dataclass(frozen=True)
class RegionSource:
    """
    Everything that applies to one region, outer scopes first, so a later
    pair for the same key wins.
    """
    line: int
    pairs: list[KeyValuePair]


class SfzParser:
    """
    Parses a token list into headings.
    """

    def __init__(self, tokens):
        self.tokens = list(tokens)
        self.headings: list[Heading] = []

    def parse(self) -> list[Heading]:
        """
        Groups the tokens.

        Returns:
            The headings in source order.

        Raises:
            SfzParseError: A pair is malformed or appears before any heading.
        """
        i = 0
        count = len(self.tokens)
        while i < count:
            token = self.tokens[i]
            if token.kind == TokenKind.TAG:
                self.headings.append(Heading(token.text, token.line))
                i += 1
                continue

            if token.kind == TokenKind.EQUAL:
                self._error("equals sign without a key", token)

            if not self.headings:
                self._error(f"opcode {token.text} before any heading", token)

            if i + 1 >= count or self.tokens[i + 1].kind != TokenKind.EQUAL:
                self._error(f"expected = after {token.text}", token)
            if i + 2 >= count or self.tokens[i + 2].kind != TokenKind.IDENTIFIER:
                self._error(f"missing value for {token.text}", self.tokens[i + 1])

            self.headings[-1].pairs.append(KeyValuePair(token.text, self.tokens[i + 2].text, token.line))
            i += 3

        return self.headings

    @staticmethod
    def _error(description: str, token: Token):
        raise SfzParseError(f"{description} at line {token.line + 1}")


def parse(tokens) -> list[Heading]:
    return SfzParser(tokens).parse()


def region_key_values(headings: list[Heading]) -> list[RegionSource]:
    """
    Flattens headings into one key/value list per region.

    Args:
        headings: Parsed headings.

    Returns:
        A RegionSource per <region>, in source order.
    """
    scopes = {name: [] for name in SCOPE_HEADINGS}
    regions = []

    for heading in headings:
        if heading.name in scopes:
            depth = SCOPE_HEADINGS.index(heading.name)
            scopes[heading.name] = heading.pairs
            for inner in SCOPE_HEADINGS[depth + 1:]:
                scopes[inner] = []
        elif heading.name == REGION_HEADING:
            pairs = []
            for name in SCOPE_HEADINGS:
                pairs.extend(scopes[name])
            pairs.extend(heading.pairs)
            regions.append(RegionSource(heading.line, pairs))
        else:
            logger.warning("ignoring unknown heading <%s> at line %d", heading.name, heading.line + 1)

    return regions
