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

"""Recursive descent parser for .proto sources."""

import logging
from typing import Dict, List, Optional, Tuple

from proto_ls.parser.ast import (
    Document,
    Field,
    FieldType,
    FullIdentifierType,
    IdentifierType,
    Import,
    ImportKind,
    MapType,
    Message,
    Option,
    Rpc,
    ScalarKind,
    ScalarType,
    Service,
    Syntax,
)
from proto_ls.parser.errors import ParseError, SemanticError
from proto_ls.parser.lexer import KEYWORDS, Lexer, Token, TokenType

logger = logging.getLogger(__name__)

MAX_FIELD_NUMBER = 0xFFFF

SCALAR_TYPES = {
    TokenType.BOOL: ScalarKind.BOOL,
    TokenType.STRING: ScalarKind.STRING,
    TokenType.BYTES: ScalarKind.BYTES,
    TokenType.FLOAT: ScalarKind.FLOAT,
    TokenType.DOUBLE: ScalarKind.DOUBLE,
}

# Types that may not be used as map keys.
INVALID_MAP_KEYS = (ScalarKind.FLOAT, ScalarKind.DOUBLE, ScalarKind.BYTES)

NAME_TYPES = frozenset([TokenType.IDENT, *KEYWORDS.values()])
TYPE_NAME_TYPES = (TokenType.IDENT, TokenType.FULL_IDENT)
OPTION_VALUE_TYPES = (
    TokenType.STRING_LITERAL,
    TokenType.INT_LITERAL,
    TokenType.IDENT,
    TokenType.FULL_IDENT,
)

UNSUPPORTED = {
    TokenType.ENUM: "enum declarations",
    TokenType.ONEOF: "oneof blocks",
    TokenType.EXTEND: "extend blocks",
}


class Parser:
    """Recursive descent parser over a lexer's token stream.

    Comments are skipped transparently. The first error aborts the parse.
    """

    def __init__(self, lexer: Lexer, filename: Optional[str] = None):
        self.lexer = lexer
        self.filename = filename

    def next_token(self) -> Optional[Token]:
        """Return the next non-comment token, or None at end of input."""
        while True:
            token = self.lexer.next_token()
            if token is None or token.type != TokenType.COMMENT:
                return token

    def require_token(self, expected: str) -> Token:
        token = self.next_token()
        if token is None:
            raise self.error_at_end(f"expected {expected}, got end of input")
        return token

    def expect(self, *types: TokenType) -> Token:
        """Consume the next token and check it is one of ``types``."""
        expected = " or ".join(t.describe() for t in types)
        token = self.require_token(expected)
        if token.type not in types:
            raise ParseError(
                f"expected {expected}, got {token.describe()}", token.line, token.column
            )
        return token

    def expect_name(self, expected: str) -> Token:
        """Consume an identifier, accepting keywords as plain names."""
        token = self.require_token(expected)
        if token.type not in NAME_TYPES:
            raise ParseError(
                f"expected {expected}, got {token.describe()}", token.line, token.column
            )
        return token

    def error_at_end(self, message: str) -> ParseError:
        cursor = self.lexer.cursor
        return ParseError(message, cursor.line, cursor.column)

    def unexpected(self, token: Token, context: str = "") -> ParseError:
        suffix = f" {context}" if context else ""
        return ParseError(
            f"unexpected token {token.describe()}{suffix}", token.line, token.column
        )

    def parse(self) -> Document:
        syntax = self.parse_syntax()

        package: Optional[Tuple[str, ...]] = None
        imports: List[Import] = []
        options: List[Option] = []
        messages: List[Message] = []
        services: List[Service] = []

        while True:
            token = self.next_token()
            if token is None:
                break
            if token.type == TokenType.SEMI:
                continue
            if token.type == TokenType.SYNTAX:
                raise ParseError("Duplicate syntax declaration", token.line, token.column)
            if token.type == TokenType.PACKAGE:
                if package is not None:
                    raise ParseError(
                        "Duplicate package declaration", token.line, token.column
                    )
                package = self.parse_package()
            elif token.type == TokenType.IMPORT:
                imports.append(self.parse_import(token))
            elif token.type == TokenType.OPTION:
                options.append(self.parse_option(token))
            elif token.type == TokenType.MESSAGE:
                messages.append(self.parse_message(token))
            elif token.type == TokenType.SERVICE:
                services.append(self.parse_service(token))
            elif token.type in UNSUPPORTED:
                raise self.not_supported(token)
            else:
                raise self.unexpected(token)

        document = Document(
            syntax=syntax,
            package=package or (),
            imports=tuple(imports),
            options=tuple(options),
            messages=tuple(messages),
            services=tuple(services),
            source_file=self.filename,
        )
        logger.debug(
            "Parsed %s: %d message(s), %d service(s)",
            self.filename or "<input>",
            len(document.messages),
            len(document.services),
        )
        return document

    def not_supported(self, token: Token) -> ParseError:
        return ParseError(
            f"{UNSUPPORTED[token.type]} are not supported yet", token.line, token.column
        )

    def parse_syntax(self) -> Syntax:
        self.expect(TokenType.SYNTAX)
        self.expect(TokenType.EQUALS)
        token = self.expect(TokenType.STRING_LITERAL)
        try:
            syntax = Syntax(token.value)
        except ValueError:
            raise ParseError(
                f"expected a syntax of either 'proto3' or 'proto2', got {token.value!r}",
                token.line,
                token.column,
            ) from None
        self.expect(TokenType.SEMI)
        return syntax

    def parse_package(self) -> Tuple[str, ...]:
        token = self.expect(*TYPE_NAME_TYPES)
        self.expect(TokenType.SEMI)
        return self.segments(token)

    def parse_import(self, start: Token) -> Import:
        token = self.require_token("import path")
        kind = ImportKind.DEFAULT
        if token.type == TokenType.PUBLIC:
            kind = ImportKind.PUBLIC
        elif token.type == TokenType.WEAK:
            kind = ImportKind.WEAK
        if kind != ImportKind.DEFAULT:
            token = self.require_token("import path")
        if token.type != TokenType.STRING_LITERAL:
            raise ParseError(
                f"expected import path string, got {token.describe()}",
                token.line,
                token.column,
            )
        self.expect(TokenType.SEMI)
        return Import(path=token.value, kind=kind, line=start.line, column=start.column)

    def parse_option(self, start: Token) -> Option:
        name = self.expect(*TYPE_NAME_TYPES)
        self.expect(TokenType.EQUALS)
        value = self.require_token("option value")
        if value.type not in OPTION_VALUE_TYPES:
            raise ParseError(
                f"expected option value, got {value.describe()}",
                value.line,
                value.column,
            )
        self.expect(TokenType.SEMI)
        return Option(
            name=name.text,
            value=value.text,
            quoted=value.type == TokenType.STRING_LITERAL,
            line=start.line,
            column=start.column,
        )

    def parse_message(self, start: Token) -> Message:
        name = self.expect(TokenType.IDENT).value
        self.expect(TokenType.LBRACE)

        fields: List[Field] = []
        nested_messages: List[Message] = []
        options: List[Option] = []

        while True:
            token = self.require_token("'}'")
            if token.type == TokenType.RBRACE:
                break
            if token.type == TokenType.SEMI:
                continue
            if token.type == TokenType.MESSAGE:
                nested_messages.append(self.parse_message(token))
            elif token.type == TokenType.OPTION:
                options.append(self.parse_option(token))
            elif token.type in (TokenType.RESERVED, TokenType.EXTENSIONS):
                self.skip_statement()
            elif token.type in UNSUPPORTED:
                raise self.not_supported(token)
            else:
                fields.append(self.parse_field(token))

        self.check_fields(name, fields)
        return Message(
            name=name,
            fields=tuple(fields),
            nested_messages=tuple(nested_messages),
            options=tuple(options),
            line=start.line,
            column=start.column,
        )

    def skip_statement(self) -> None:
        while self.require_token("';'").type != TokenType.SEMI:
            pass

    def parse_field(self, start: Token) -> Field:
        try:
            token = start
            repeated = token.type == TokenType.REPEATED
            if repeated:
                token = self.require_token("field type")
            field_type = self.parse_field_type(token)
            name = self.expect_name("field name")
            self.expect(TokenType.EQUALS)
            number = self.expect(TokenType.INT_LITERAL)
            self.expect(TokenType.SEMI)
        except ParseError as exc:
            raise ParseError(
                f"invalid message field: {exc.message}", exc.line, exc.column
            ) from exc

        if not 1 <= number.value <= MAX_FIELD_NUMBER:
            raise SemanticError(
                f"Field number {number.value} out of range (1-{MAX_FIELD_NUMBER})",
                number.line,
                number.column,
            )
        return Field(
            type=field_type,
            name=name.value,
            number=number.value,
            repeated=repeated,
            line=start.line,
            column=start.column,
        )

    def parse_field_type(self, token: Token) -> FieldType:
        if token.type in SCALAR_TYPES:
            return ScalarType(SCALAR_TYPES[token.type])
        if token.type == TokenType.IDENT:
            return IdentifierType(token.value)
        if token.type == TokenType.FULL_IDENT:
            return FullIdentifierType(token.value)
        if token.type == TokenType.MAP:
            return self.parse_map_type()
        raise ParseError(
            f"expected field type, got {token.describe()}", token.line, token.column
        )

    def parse_map_type(self) -> MapType:
        self.expect(TokenType.LANGLE)
        key_token = self.require_token("map key type")
        key = self.parse_field_type(key_token)
        if isinstance(key, MapType) or (
            isinstance(key, ScalarType) and key.kind in INVALID_MAP_KEYS
        ):
            raise SemanticError(
                f"Invalid map key type '{key}'", key_token.line, key_token.column
            )
        self.expect(TokenType.COMMA)
        value = self.parse_field_type(self.require_token("map value type"))
        self.expect(TokenType.RANGLE)
        return MapType(key=key, value=value)

    def check_fields(self, message: str, fields: List[Field]) -> None:
        numbers: Dict[int, Field] = {}
        names: Dict[str, Field] = {}
        for f in fields:
            if f.number in numbers:
                raise SemanticError(
                    f"Duplicate field number {f.number} in {message}: "
                    f"{numbers[f.number].name} and {f.name}",
                    f.line,
                    f.column,
                )
            if f.name in names:
                raise SemanticError(
                    f"Duplicate field name {f.name} in {message}", f.line, f.column
                )
            numbers[f.number] = f
            names[f.name] = f

    def parse_service(self, start: Token) -> Service:
        name = self.expect(TokenType.IDENT).value
        self.expect(TokenType.LBRACE)

        rpcs: List[Rpc] = []
        options: List[Option] = []
        while True:
            token = self.require_token("'}'")
            if token.type == TokenType.RBRACE:
                break
            if token.type == TokenType.SEMI:
                continue
            if token.type == TokenType.OPTION:
                options.append(self.parse_option(token))
            elif token.type == TokenType.IDENT and token.value == "rpc":
                rpcs.append(self.parse_rpc(token))
            else:
                raise self.unexpected(token, f"in service {name}")

        return Service(
            name=name,
            rpcs=tuple(rpcs),
            options=tuple(options),
            line=start.line,
            column=start.column,
        )

    def parse_rpc(self, start: Token) -> Rpc:
        name = self.expect(TokenType.IDENT).value
        self.expect(TokenType.LPAREN)
        params = [self.expect(*TYPE_NAME_TYPES).text]
        while self.expect(TokenType.COMMA, TokenType.RPAREN).type == TokenType.COMMA:
            params.append(self.expect(*TYPE_NAME_TYPES).text)

        returns = self.expect(TokenType.IDENT)
        if returns.value != "returns":
            raise ParseError(
                f"expected 'returns', got {returns.describe()}",
                returns.line,
                returns.column,
            )
        self.expect(TokenType.LPAREN)
        result = self.expect(*TYPE_NAME_TYPES).text
        self.expect(TokenType.RPAREN)

        if self.expect(TokenType.SEMI, TokenType.LBRACE).type == TokenType.LBRACE:
            while True:
                token = self.require_token("'}'")
                if token.type == TokenType.RBRACE:
                    break
                if token.type == TokenType.OPTION:
                    self.parse_option(token)
                elif token.type != TokenType.SEMI:
                    raise self.unexpected(token, f"in rpc {name}")

        return Rpc(
            name=name,
            params=tuple(params),
            returns=result,
            line=start.line,
            column=start.column,
        )

    @staticmethod
    def segments(token: Token) -> Tuple[str, ...]:
        if token.type == TokenType.FULL_IDENT:
            return token.value
        return (token.value,)
