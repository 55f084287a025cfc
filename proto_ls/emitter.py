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

"""Emit a parsed document as canonical .proto source."""

from typing import List

from proto_ls.parser.ast import (
    Document,
    Field,
    Import,
    ImportKind,
    Message,
    Option,
    Rpc,
    Service,
)


class ProtoEmitter:
    """Render a Document back to .proto text."""

    def __init__(self, document: Document):
        self.document = document
        self.indent = "    "

    def emit(self) -> str:
        lines: List[str] = [f'syntax = "{self.document.syntax.value}";', ""]

        if self.document.package:
            lines.append(f"package {self.document.package_name};")
            lines.append("")

        for imp in self.document.imports:
            lines.append(self._emit_import(imp))
        if self.document.imports:
            lines.append("")

        for option in self.document.options:
            lines.append(self._emit_option(option))
        if self.document.options:
            lines.append("")

        for message in self.document.messages:
            lines.extend(self._emit_message(message))
            lines.append("")

        for service in self.document.services:
            lines.extend(self._emit_service(service))
            lines.append("")

        return "\n".join(lines).rstrip() + "\n"

    def _emit_import(self, imp: Import) -> str:
        modifier = "" if imp.kind == ImportKind.DEFAULT else f"{imp.kind.value} "
        return f"import {modifier}{self._quote(imp.path)};"

    def _emit_option(self, option: Option) -> str:
        value = self._quote(option.value) if option.quoted else option.value
        return f"option {option.name} = {value};"

    def _emit_message(self, message: Message, level: int = 0) -> List[str]:
        indent = self.indent * level
        inner = indent + self.indent
        lines = [f"{indent}message {message.name} {{"]

        for option in message.options:
            lines.append(inner + self._emit_option(option))

        for nested in message.nested_messages:
            lines.extend(self._emit_message(nested, level + 1))

        for field in message.fields:
            lines.append(inner + self._emit_field(field))

        lines.append(f"{indent}}}")
        return lines

    def _emit_field(self, field: Field) -> str:
        label = "repeated " if field.repeated else ""
        return f"{label}{field.type} {field.name} = {field.number};"

    def _emit_service(self, service: Service) -> List[str]:
        lines = [f"service {service.name} {{"]
        for option in service.options:
            lines.append(self.indent + self._emit_option(option))
        for rpc in service.rpcs:
            lines.append(self.indent + self._emit_rpc(rpc))
        lines.append("}")
        return lines

    def _emit_rpc(self, rpc: Rpc) -> str:
        params = ", ".join(rpc.params)
        return f"rpc {rpc.name} ({params}) returns ({rpc.returns});"

    @staticmethod
    def _quote(value: str) -> str:
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
