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

"""Errors raised while reading, lexing and parsing proto sources."""


class ProtoError(Exception):
    """Base class for all failures of a parse pass."""

    def __init__(self, message: str, line: int, column: int):
        super().__init__(f"Line {line}, Column {column}: {message}")
        self.message = message
        self.line = line
        self.column = column


class ReadError(ProtoError):
    """The underlying byte source failed."""


class LexerError(ProtoError):
    """Error during lexing."""


class ParseError(ProtoError):
    """Error during proto parsing."""


class SemanticError(ProtoError):
    """Source is well-formed but violates a proto rule."""
