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

"""Tests for the proto lexer."""

import pytest

from proto_ls.parser.errors import LexerError, SemanticError
from proto_ls.parser.lexer import KEYWORDS, Lexer, TokenType


def lex(source):
    return Lexer(source).tokenize()


def first(source):
    return Lexer(source).next_token()


@pytest.mark.parametrize("keyword, token_type", sorted(KEYWORDS.items()))
def test_keywords(keyword, token_type):
    lexer = Lexer(keyword + "=")
    token = lexer.next_token()
    assert token.type == token_type
    assert token.value == keyword
    # exactly the keyword bytes were consumed
    assert lexer.cursor.peek() == ord("=")


def test_keywords_are_case_sensitive():
    token = first("Message")
    assert token.type == TokenType.IDENT
    assert token.value == "Message"


def test_identifier():
    token = first("user_name2")
    assert token.type == TokenType.IDENT
    assert token.value == "user_name2"


def test_full_identifier():
    token = first("foo.bar.baz")
    assert token.type == TokenType.FULL_IDENT
    assert token.value == ("foo", "bar", "baz")
    assert token.text == "foo.bar.baz"


def test_full_identifier_is_never_a_keyword():
    token = first("message.syntax")
    assert token.type == TokenType.FULL_IDENT
    assert token.value == ("message", "syntax")


def test_trailing_dot_is_an_error():
    with pytest.raises(LexerError, match="Identifier required after a dot"):
        lex("foo.")


def test_dot_followed_by_digit_is_an_error():
    with pytest.raises(LexerError, match="Identifier required after a dot"):
        lex("foo.1")


def test_string_literal():
    token = first('"string"')
    assert token.type == TokenType.STRING_LITERAL
    assert token.value == "string"


def test_single_quoted_string_literal():
    assert first("'path/to.proto'").value == "path/to.proto"


def test_string_literal_escaped_quote():
    token = first('"str\\"ing"')
    assert token.type == TokenType.STRING_LITERAL
    assert token.value == 'str"ing'


def test_string_literal_escape_is_verbatim():
    assert first(r'"a\\b\n"').value == "a\\bn"


def test_string_literal_utf8():
    assert first('"héllo"'.encode("utf-8")).value == "héllo"


def test_string_literal_invalid_utf8():
    with pytest.raises(SemanticError, match="Invalid UTF-8"):
        lex(b'"\xff"')


@pytest.mark.parametrize("source", ['"abc', '"abc\\', "'abc\""])
def test_unterminated_string_literal(source):
    with pytest.raises(LexerError, match="Unterminated string literal"):
        lex(source)


def test_int_literal():
    token = first("42")
    assert token.type == TokenType.INT_LITERAL
    assert token.value == 42


def test_zero_literal():
    assert first("0").value == 0


def test_leading_zero_is_an_error():
    with pytest.raises(LexerError, match="leading zero"):
        lex("012")


def test_sign_is_not_part_of_int_literal():
    with pytest.raises(LexerError, match="Unexpected character '-'"):
        lex("-1")


@pytest.mark.parametrize(
    "source, expected",
    [
        ("//comment\n", "comment"),
        ("//comment\r\n", "comment"),
        ("//comment", "comment"),
        ("/*comment*/", "comment"),
        ("/*comm*ent*/", "comm*ent"),
        ("/*comm\nent*/", "comm\nent"),
        ("/**/", ""),
        ("/***/", "*"),
    ],
)
def test_comments(source, expected):
    token = first(source)
    assert token.type == TokenType.COMMENT
    assert token.value == expected


def test_line_comment_consumes_newline():
    tokens = lex("// note\nmessage")
    assert [t.type for t in tokens] == [TokenType.COMMENT, TokenType.MESSAGE]
    assert tokens[0].value == " note"
    assert (tokens[1].line, tokens[1].column) == (2, 1)


def test_unterminated_block_comment():
    with pytest.raises(LexerError, match="Unterminated block comment"):
        lex("/* never closed *")


def test_lone_slash_is_an_error():
    with pytest.raises(LexerError, match="Unexpected character '/'"):
        lex("/ x")


def test_unrecognized_byte_is_an_error():
    with pytest.raises(LexerError, match="Unexpected character '@'") as exc_info:
        lex("message @")
    assert (exc_info.value.line, exc_info.value.column) == (1, 9)


def test_punctuation():
    tokens = lex(";={}()[]:<>,")
    assert [t.type for t in tokens] == [
        TokenType.SEMI,
        TokenType.EQUALS,
        TokenType.LBRACE,
        TokenType.RBRACE,
        TokenType.LPAREN,
        TokenType.RPAREN,
        TokenType.LBRACKET,
        TokenType.RBRACKET,
        TokenType.COLON,
        TokenType.LANGLE,
        TokenType.RANGLE,
        TokenType.COMMA,
    ]


def test_token_positions():
    tokens = lex('syntax = "proto3";\n  message M {}')
    positions = [(t.type, t.line, t.column) for t in tokens]
    assert positions[:4] == [
        (TokenType.SYNTAX, 1, 1),
        (TokenType.EQUALS, 1, 8),
        (TokenType.STRING_LITERAL, 1, 10),
        (TokenType.SEMI, 1, 18),
    ]
    assert positions[4] == (TokenType.MESSAGE, 2, 3)


def test_sequence_is_finite_and_not_restartable():
    lexer = Lexer("a b")
    assert [t.value for t in lexer] == ["a", "b"]
    assert lexer.next_token() is None
    assert list(lexer) == []


def test_empty_input():
    assert lex(" \t\r\n") == []
