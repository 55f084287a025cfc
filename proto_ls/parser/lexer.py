# Licensed to the Apache Software Foundation (ASF) under one
# or more contributor license agreements.  See the NOTICE file
# distributed with this work for additional information
# regarding copyright ownership.  The ASF licenses this file
# to you under the Apache License, Version 2.0 (the
# "License"); you may not use this file except in compliance
# with the License.  You may obtain a copy of the License at
#
#   http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing,
# software distributed under the License is distributed on an
# "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY
# KIND, either express or implied.  See the License for the
# specific language governing permissions and limitations
# under the License.

"""Hand-written streaming lexer for .proto sources."""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, List, Optional, Tuple, Union

from proto_ls.parser.cursor import ByteCursor, Source
from proto_ls.parser.errors import LexerError, SemanticError


class TokenType(Enum):
    """Token types for proto sources."""

    # Keywords
    SYNTAX = auto()
    PACKAGE = auto()
    OPTION = auto()
    IMPORT = auto()
    MESSAGE = auto()
    SERVICE = auto()
    ENUM = auto()
    ONEOF = auto()
    REPEATED = auto()
    WEAK = auto()
    PUBLIC = auto()
    RESERVED = auto()
    EXTEND = auto()
    EXTENSIONS = auto()
    TO = auto()
    MAX = auto()
    MAP = auto()

    # Scalar type keywords
    BOOL = auto()
    STRING = auto()
    BYTES = auto()
    FLOAT = auto()
    DOUBLE = auto()

    # Identifiers and literals
    IDENT = auto()
    FULL_IDENT = auto()
    STRING_LITERAL = auto()
    INT_LITERAL = auto()

    # Punctuation
    SEMI = auto()
    EQUALS = auto()
    LBRACE = auto()
    RBRACE = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    COLON = auto()
    LANGLE = auto()
    RANGLE = auto()
    COMMA = auto()

    COMMENT = auto()

    def describe(self) -> str:
        """Human readable name used in error messages."""
        text = _TYPE_TEXT.get(self)
        if text is not None:
            return f"'{text}'"
        return _LITERAL_NAMES[self]


KEYWORDS = {
    "syntax": TokenType.SYNTAX,
    "package": TokenType.PACKAGE,
    "option": TokenType.OPTION,
    "import": TokenType.IMPORT,
    "message": TokenType.MESSAGE,
    "service": TokenType.SERVICE,
    "enum": TokenType.ENUM,
    "oneof": TokenType.ONEOF,
    "repeated": TokenType.REPEATED,
    "weak": TokenType.WEAK,
    "public": TokenType.PUBLIC,
    "reserved": TokenType.RESERVED,
    "extend": TokenType.EXTEND,
    "extensions": TokenType.EXTENSIONS,
    "to": TokenType.TO,
    "max": TokenType.MAX,
    "map": TokenType.MAP,
    "bool": TokenType.BOOL,
    "string": TokenType.STRING,
    "bytes": TokenType.BYTES,
    "float": TokenType.FLOAT,
    "double": TokenType.DOUBLE,
}

PUNCTUATION = {
    ord(";"): TokenType.SEMI,
    ord("="): TokenType.EQUALS,
    ord("{"): TokenType.LBRACE,
    ord("}"): TokenType.RBRACE,
    ord("("): TokenType.LPAREN,
    ord(")"): TokenType.RPAREN,
    ord("["): TokenType.LBRACKET,
    ord("]"): TokenType.RBRACKET,
    ord(":"): TokenType.COLON,
    ord("<"): TokenType.LANGLE,
    ord(">"): TokenType.RANGLE,
    ord(","): TokenType.COMMA,
}

_TYPE_TEXT = {token_type: text for text, token_type in KEYWORDS.items()}
_TYPE_TEXT.update({token_type: chr(ch) for ch, token_type in PUNCTUATION.items()})

_LITERAL_NAMES = {
    TokenType.IDENT: "identifier",
    TokenType.FULL_IDENT: "full identifier",
    TokenType.STRING_LITERAL: "string literal",
    TokenType.INT_LITERAL: "integer literal",
    TokenType.COMMENT: "comment",
}

WHITESPACE = b" \t\r\n"
DIGITS = b"0123456789"
QUOTES = b"\"'"
BACKSLASH = ord("\\")
DOT = ord(".")
SLASH = ord("/")
STAR = ord("*")
NEWLINE = ord("\n")
CARRIAGE_RETURN = ord("\r")
ZERO = ord("0")


def _is_ident_start(byte: int) -> bool:
    return 0x41 <= byte <= 0x5A or 0x61 <= byte <= 0x7A


def _is_ident_part(byte: int) -> bool:
    return _is_ident_start(byte) or byte in DIGITS or byte == 0x5F


TokenValue = Union[str, int, Tuple[str, ...]]


@dataclass(frozen=True)
class Token:
    """A token produced by the lexer.

    ``value`` is the identifier text, a tuple of segments for full
    identifiers, the decoded literal, the punctuation text or the
    comment body.
    """

    type: TokenType
    value: TokenValue
    line: int
    column: int

    @property
    def text(self) -> str:
        if self.type == TokenType.FULL_IDENT:
            return ".".join(self.value)
        return str(self.value)

    def describe(self) -> str:
        if self.type in _LITERAL_NAMES:
            return f"{self.type.describe()} {self.text!r}"
        return self.type.describe()

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


class Lexer:
    """Lazy tokenizer over a byte cursor.

    Iterating yields tokens until end of input; the sequence cannot be
    restarted. Comments are produced as ``COMMENT`` tokens.
    """

    def __init__(self, source: Union[Source, ByteCursor]):
        self.cursor = ByteCursor.wrap(source)
        self._done = False

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        token = self.next_token()
        if token is None:
            raise StopIteration
        return token

    def tokenize(self) -> List[Token]:
        return list(self)

    def next_token(self) -> Optional[Token]:
        """Return the next token, or None once the input is exhausted."""
        if self._done:
            return None
        self.cursor.take_while(lambda b: b in WHITESPACE)

        byte = self.cursor.peek()
        if byte is None:
            self._done = True
            return None

        line, column = self.cursor.line, self.cursor.column

        if _is_ident_start(byte):
            return self._read_identifier(line, column)
        if byte in QUOTES:
            return Token(
                TokenType.STRING_LITERAL, self._read_string(line, column), line, column
            )
        if byte in DIGITS:
            return Token(
                TokenType.INT_LITERAL, self._read_int(line, column), line, column
            )
        if byte in PUNCTUATION:
            self.cursor.pop()
            return Token(PUNCTUATION[byte], chr(byte), line, column)
        if byte == SLASH:
            lookahead = self.cursor.peek_bytes(2)
            if lookahead == b"//":
                return Token(
                    TokenType.COMMENT, self._read_line_comment(line, column), line, column
                )
            if lookahead == b"/*":
                return Token(
                    TokenType.COMMENT,
                    self._read_block_comment(line, column),
                    line,
                    column,
                )

        raise LexerError(f"Unexpected character {chr(byte)!r}", line, column)

    def _decode(self, data: bytes, what: str, line: int, column: int) -> str:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SemanticError(f"Invalid UTF-8 in {what}: {exc}", line, column) from exc

    def _read_identifier(self, line: int, column: int) -> Token:
        segments = []
        while True:
            segment = self.cursor.take_while(_is_ident_part)
            segments.append(segment.decode("ascii"))
            if self.cursor.peek() != DOT:
                break
            dot_line, dot_column = self.cursor.line, self.cursor.column
            self.cursor.pop()
            following = self.cursor.peek()
            if following is None or not _is_ident_start(following):
                raise LexerError(
                    "Identifier required after a dot", dot_line, dot_column
                )

        if len(segments) > 1:
            return Token(TokenType.FULL_IDENT, tuple(segments), line, column)
        name = segments[0]
        return Token(KEYWORDS.get(name, TokenType.IDENT), name, line, column)

    def _read_string(self, line: int, column: int) -> str:
        quote = self.cursor.pop()
        result = bytearray()
        while True:
            byte = self.cursor.pop()
            if byte is None:
                raise LexerError("Unterminated string literal", line, column)
            if byte == quote:
                return self._decode(bytes(result), "string literal", line, column)
            if byte == BACKSLASH:
                # the escaped byte is kept verbatim
                byte = self.cursor.pop()
                if byte is None:
                    raise LexerError("Unterminated string literal", line, column)
            result.append(byte)

    def _read_int(self, line: int, column: int) -> int:
        digits = self.cursor.take_while(lambda b: b in DIGITS)
        if len(digits) > 1 and digits[0] == ZERO:
            raise LexerError(
                f"Integer literal {digits.decode('ascii')!r} has a leading zero",
                line,
                column,
            )
        return int(digits)

    def _read_line_comment(self, line: int, column: int) -> str:
        self.cursor.pop()
        self.cursor.pop()
        body = self.cursor.take_while(lambda b: b != NEWLINE)
        self.cursor.pop()
        if body and body[-1] == CARRIAGE_RETURN:
            body = body[:-1]
        return self._decode(body, "comment", line, column)

    def _read_block_comment(self, line: int, column: int) -> str:
        self.cursor.pop()
        self.cursor.pop()
        body = bytearray()
        while True:
            body.extend(self.cursor.take_while(lambda b: b != STAR))
            if self.cursor.peek() is None:
                raise LexerError("Unterminated block comment", line, column)
            if self.cursor.peek_bytes(2) == b"*/":
                self.cursor.pop()
                self.cursor.pop()
                return self._decode(bytes(body), "comment", line, column)
            body.append(self.cursor.pop())
