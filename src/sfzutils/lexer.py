# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
SFZ Lexer - Turns instrument-definition text into a token stream.

The text is consumed one character at a time by a small state machine.
Produces three kinds of tokens:
- TAG: "<region>" and friends (the name without brackets)
- IDENTIFIER: opcode names and their values
- EQUAL: the "=" between them

Values of String-typed opcodes (sample paths) may contain spaces, so whether
whitespace ends an identifier depends on the identifier before it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Optional

from .constants import MAX_INCLUDE_DEPTH, OpcodeType
from .schema import key_text_to_type

logger = logging.getLogger(__name__)

INCLUDE_KEYWORD = "include"

IncludeHandler = Callable[[str], Optional[str]]


class SfzLexError(ValueError):
    """The text could not be lexed. The message ends with "at line <n>"."""


class TokenKind(Enum):
    TAG = auto()
    IDENTIFIER = auto()
    EQUAL = auto()


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line: int  # 0-based

    def __str__(self):
        if self.kind == TokenKind.EQUAL:
            return "Equal"
        if self.kind == TokenKind.TAG:
            return f"tag={self.text}"
        return f"id={self.text}"


class _State(Enum):
    READY = auto()
    IN_TAG = auto()
    IN_COMMENT = auto()
    IN_INCLUDE = auto()
    IN_IDENTIFIER = auto()


class _IncludeState(Enum):
    MATCHING_OPCODE = auto()
    MATCHING_SPACE = auto()
    MATCHING_FILE_NAME = auto()


def reject_include(quoted_name: str) -> Optional[str]:
    """Default include handler: includes are not supported."""
    return None


class SfzLexer:
    """
    A single-use lexer for one piece of text.
    """

    def __init__(self, include_handler: Optional[IncludeHandler] = None, include_depth: int = 0):
        """
        Initializes the lexer.

        Args:
            include_handler: Called with the quoted file name of an
                `#include "name"` directive; returns the text to lex in its
                place, or None to reject it. Defaults to rejecting every include.
            include_depth: How deeply this lexer is nested inside includes.
        """
        self.include_handler = include_handler or reject_include
        self.include_depth = include_depth

        self.tokens: list[Token] = []
        self.current_line = 0

        self._state = _State.READY
        self._include_state = _IncludeState.MATCHING_OPCODE
        self._cur_item = ""
        self._space_count = 0
        self._last_identifier_type = OpcodeType.UNKNOWN

        self._dispatch = {
            _State.READY: self._proc_fresh_char,
            _State.IN_TAG: self._proc_tag_char,
            _State.IN_COMMENT: self._proc_comment_char,
            _State.IN_INCLUDE: self._proc_include_char,
            _State.IN_IDENTIFIER: self._proc_identifier_char,
        }

    def lex(self, text: str) -> list[Token]:
        """
        Lexes the whole text.

        Returns:
            The token list.

        Raises:
            SfzLexError: The text is malformed. No tokens are returned.
        """
        for c in text:
            if c == "\n":
                self.current_line += 1
            self._dispatch[self._state](c)
        self._proc_end()
        return self.tokens

    def _error(self, description: str):
        raise SfzLexError(f"{description} at line {self.current_line + 1}")

    def _proc_end(self):
        if self._state == _State.IN_IDENTIFIER:
            self._add_identifier(self._cur_item)
        elif self._state == _State.IN_TAG:
            self._error("unterminated tag")

    def _proc_fresh_char(self, c: str):
        if c.isspace():
            return
        if c == "<":
            self._state = _State.IN_TAG
            self._cur_item = ""
        elif c == "/":
            self._state = _State.IN_COMMENT
        elif c == "=":
            self._add_token(Token(TokenKind.EQUAL, "=", self.current_line))
        elif c == "#":
            self._state = _State.IN_INCLUDE
            self._include_state = _IncludeState.MATCHING_OPCODE
            self._cur_item = ""
        else:
            self._state = _State.IN_IDENTIFIER
            self._cur_item = c

    def _proc_comment_char(self, c: str):
        if c in "\r\n":
            self._state = _State.READY

    def _proc_tag_char(self, c: str):
        if c.isspace():
            self._error("white space in tag")
        if c == "<":
            self._error("nested tag")
        if c == ">":
            self._add_token(Token(TokenKind.TAG, self._cur_item, self.current_line))
            self._cur_item = ""
            self._state = _State.READY
            return
        self._cur_item += c

    def _proc_include_char(self, c: str):
        if self._include_state == _IncludeState.MATCHING_OPCODE:
            self._cur_item += c
            if not INCLUDE_KEYWORD.startswith(self._cur_item):
                self._error("Malformed #include")
            if self._cur_item == INCLUDE_KEYWORD:
                self._include_state = _IncludeState.MATCHING_SPACE
                self._space_count = 0

        elif self._include_state == _IncludeState.MATCHING_SPACE:
            if c.isspace():
                self._space_count += 1
                return
            if self._space_count == 0:
                self._error("Malformed #include")
            self._include_state = _IncludeState.MATCHING_FILE_NAME
            self._cur_item = c

        else:
            if c == "\n":
                self._error("end of line in #include file name")
            self._cur_item += c
            if c == "\"" and len(self._cur_item) > 1:
                self._include(self._cur_item)

    def _include(self, quoted_name: str):
        if self.include_depth >= MAX_INCLUDE_DEPTH:
            self._error(f"too many nested includes ({quoted_name})")

        try:
            text = self.include_handler(quoted_name)
        except SfzLexError:
            raise
        except Exception as e:
            self._error(f"can't process include file {quoted_name}: {e}")
        if text is None:
            self._error(f"can't process include file {quoted_name}")

        nested = SfzLexer(self.include_handler, self.include_depth + 1)
        self.tokens.extend(nested.lex(text))

        self._cur_item = ""
        self._state = _State.READY
        self._last_identifier_type = OpcodeType.UNKNOWN

    def _proc_identifier_char(self, c: str):
        if c == "=":
            self._proc_equals_in_identifier()
            return

        # terminate on these, then process them fresh
        if c in "<\r\n":
            self._add_identifier(self._cur_item)
            self._state = _State.READY
            self._proc_fresh_char(c)
            return

        # spaces are part of String values (sample file names)
        if c.isspace() and self._last_identifier_type != OpcodeType.STRING:
            self._add_identifier(self._cur_item)
            self._state = _State.READY
            return

        self._cur_item += c

    def _proc_equals_in_identifier(self):
        if self._last_identifier_type != OpcodeType.STRING:
            self._add_identifier(self._cur_item)
            self._state = _State.READY
            self._proc_fresh_char("=")
            return

        # "sample=a b.wav lokey=..." - the accumulated text holds the file
        # name, some spaces, and the next key.
        last_space = self._cur_item.rfind(" ")
        if last_space < 0:
            logger.warning("equals sign found in identifier at line %d", self.current_line + 1)
            self._error("equals sign in identifier")

        next_id = self._cur_item[last_space + 1:]
        file_name_end = last_space
        while file_name_end > 0 and self._cur_item[file_name_end - 1] == " ":
            file_name_end -= 1
        file_name = self._cur_item[:file_name_end]

        self._add_identifier(file_name)
        self._add_identifier(next_id)
        self._state = _State.READY
        self._proc_fresh_char("=")

    def _add_identifier(self, text: str):
        self._add_token(Token(TokenKind.IDENTIFIER, text, self.current_line))
        self._cur_item = ""

    def _add_token(self, token: Token):
        self.tokens.append(token)
        if token.kind == TokenKind.IDENTIFIER:
            # the next identifier's termination rule depends on this
            self._last_identifier_type = key_text_to_type(token.text)


def lex(text: str, include_handler: Optional[IncludeHandler] = None) -> list[Token]:
    """
    Lexes SFZ text.

    Args:
        text: The instrument definition.
        include_handler: See SfzLexer.

    Returns:
        The token list.

    Raises:
        SfzLexError: The text is malformed.
    """
    return SfzLexer(include_handler).lex(text)
