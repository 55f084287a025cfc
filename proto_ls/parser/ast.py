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

"""Document tree produced by the proto parser."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


class Syntax(Enum):
    PROTO2 = "proto2"
    PROTO3 = "proto3"


class ImportKind(Enum):
    DEFAULT = "default"
    WEAK = "weak"
    PUBLIC = "public"


class ScalarKind(Enum):
    """Scalar types that have their own keyword."""

    BOOL = "bool"
    STRING = "string"
    BYTES = "bytes"
    FLOAT = "float"
    DOUBLE = "double"


@dataclass(frozen=True)
class ScalarType:
    kind: ScalarKind

    def __str__(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class IdentifierType:
    """A single-segment type name such as ``int32`` or ``Person``."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class FullIdentifierType:
    """A dot-qualified type name such as ``google.protobuf.Any``."""

    segments: Tuple[str, ...]

    def __str__(self) -> str:
        return ".".join(self.segments)


@dataclass(frozen=True)
class MapType:
    key: "FieldType"
    value: "FieldType"

    def __str__(self) -> str:
        return f"map<{self.key}, {self.value}>"


FieldType = Union[ScalarType, IdentifierType, FullIdentifierType, MapType]


@dataclass(frozen=True)
class Import:
    """An import statement."""

    path: str
    kind: ImportKind = ImportKind.DEFAULT
    line: int = 0
    column: int = 0


@dataclass(frozen=True)
class Option:
    """An ``option name = value;`` statement.

    ``quoted`` is False when the value was an identifier or an integer
    literal rather than a string literal.
    """

    name: str
    value: str
    quoted: bool = True
    line: int = 0
    column: int = 0


@dataclass(frozen=True)
class Field:
    """Represents a message field."""

    type: FieldType
    name: str
    number: int
    repeated: bool = False
    line: int = 0
    column: int = 0


@dataclass(frozen=True)
class Message:
    """Represents a message declaration."""

    name: str
    fields: Tuple[Field, ...] = ()
    nested_messages: Tuple["Message", ...] = ()
    options: Tuple[Option, ...] = ()
    line: int = 0
    column: int = 0


@dataclass(frozen=True)
class Rpc:
    name: str
    params: Tuple[str, ...]
    returns: str
    line: int = 0
    column: int = 0


@dataclass(frozen=True)
class Service:
    name: str
    rpcs: Tuple[Rpc, ...] = ()
    options: Tuple[Option, ...] = ()
    line: int = 0
    column: int = 0


@dataclass(frozen=True)
class Document:
    """Represents a parsed .proto file."""

    syntax: Syntax
    package: Tuple[str, ...] = ()
    imports: Tuple[Import, ...] = ()
    options: Tuple[Option, ...] = ()
    messages: Tuple[Message, ...] = ()
    services: Tuple[Service, ...] = ()
    source_file: Optional[str] = None

    @property
    def package_name(self) -> str:
        return ".".join(self.package)
