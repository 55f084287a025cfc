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

"""Proto source parsing."""

from pathlib import Path
from typing import Union

from proto_ls.parser.ast import Document
from proto_ls.parser.cursor import ByteCursor, Source
from proto_ls.parser.errors import (
    LexerError,
    ParseError,
    ProtoError,
    ReadError,
    SemanticError,
)
from proto_ls.parser.lexer import Lexer, Token, TokenType
from proto_ls.parser.parser import Parser


def parse(source: Source, filename: str = "<input>") -> Document:
    """Parse one document from bytes, text or a readable binary stream."""
    return Parser(Lexer(ByteCursor.wrap(source)), filename).parse()


def parse_file(path: Union[str, Path]) -> Document:
    """Parse a .proto file, streaming it from disk."""
    path = Path(path)
    with path.open("rb") as f:
        return parse(f, str(path))


__all__ = [
    "parse",
    "parse_file",
    "ByteCursor",
    "Lexer",
    "Token",
    "TokenType",
    "Parser",
    "ProtoError",
    "ReadError",
    "LexerError",
    "ParseError",
    "SemanticError",
]
