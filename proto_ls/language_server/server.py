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

"""Language server over stdio backed by the proto parser.

Framing, the JSON-RPC envelope and the initialize/shutdown/exit lifecycle
are handled by pygls. This module registers the document features and
turns parse results into LSP diagnostics and document symbols.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from lsprotocol import types
from pygls.exceptions import JsonRpcInvalidRequest
from pygls.lsp.server import LanguageServer

from proto_ls import __version__
from proto_ls.parser import ProtoError, parse
from proto_ls.parser.ast import Document, Message, Service

logger = logging.getLogger(__name__)


@dataclass
class ServerOptions:
    """Options for the language server."""

    name: str = "proto-ls"
    version: str = __version__


def column_units(text: str, encoding: str = types.PositionEncodingKind.Utf16) -> int:
    """Length of ``text`` in the units of the negotiated position encoding."""
    if encoding == types.PositionEncodingKind.Utf8:
        return len(text.encode("utf-8"))
    if encoding == types.PositionEncodingKind.Utf32:
        return len(text)
    return len(text.encode("utf-16-le")) // 2


def to_range(
    lines: List[str],
    line: int,
    column: int,
    length: int = 1,
    encoding: str = types.PositionEncodingKind.Utf16,
) -> types.Range:
    """Convert a 1-based line and byte column into an LSP range.

    ``length`` counts characters starting at the column.
    """
    row = max(line - 1, 0)
    text = lines[row] if row < len(lines) else ""
    # byte column -> characters; a column inside a multi-byte sequence
    # rounds down to the start of that character
    prefix = text.encode("utf-8")[: max(column - 1, 0)].decode("utf-8", errors="ignore")
    covered = text[len(prefix) : len(prefix) + length]
    start = column_units(prefix, encoding)
    end = start + column_units(covered, encoding)
    return types.Range(
        start=types.Position(line=row, character=start),
        end=types.Position(line=row, character=end),
    )


def make_diagnostic(
    error: ProtoError,
    lines: List[str],
    source: str = "proto-ls",
    encoding: str = types.PositionEncodingKind.Utf16,
) -> types.Diagnostic:
    return types.Diagnostic(
        range=to_range(lines, error.line, error.column, encoding=encoding),
        severity=types.DiagnosticSeverity.Error,
        source=source,
        message=error.message,
    )


def _symbol(
    name: str,
    kind: types.SymbolKind,
    line: int,
    column: int,
    lines: List[str],
    encoding: str,
    children: Optional[List[types.DocumentSymbol]] = None,
) -> types.DocumentSymbol:
    location = to_range(lines, line, column, len(name), encoding)
    return types.DocumentSymbol(
        name=name,
        kind=kind,
        range=location,
        selection_range=location,
        children=children or [],
    )


def message_symbol(
    message: Message,
    lines: List[str],
    encoding: str = types.PositionEncodingKind.Utf16,
) -> types.DocumentSymbol:
    children = [message_symbol(nested, lines, encoding) for nested in message.nested_messages]
    children.extend(
        _symbol(f.name, types.SymbolKind.Field, f.line, f.column, lines, encoding)
        for f in message.fields
    )
    return _symbol(
        message.name,
        types.SymbolKind.Struct,
        message.line,
        message.column,
        lines,
        encoding,
        children,
    )


def service_symbol(
    service: Service,
    lines: List[str],
    encoding: str = types.PositionEncodingKind.Utf16,
) -> types.DocumentSymbol:
    children = [
        _symbol(rpc.name, types.SymbolKind.Method, rpc.line, rpc.column, lines, encoding)
        for rpc in service.rpcs
    ]
    return _symbol(
        service.name,
        types.SymbolKind.Interface,
        service.line,
        service.column,
        lines,
        encoding,
        children,
    )


def document_symbols(
    document: Document,
    text: str,
    encoding: str = types.PositionEncodingKind.Utf16,
) -> List[types.DocumentSymbol]:
    lines = text.split("\n")
    symbols = [message_symbol(m, lines, encoding) for m in document.messages]
    symbols.extend(service_symbol(s, lines, encoding) for s in document.services)
    return symbols


def check_source(
    text: str,
    uri: str,
    source: str = "proto-ls",
    encoding: str = types.PositionEncodingKind.Utf16,
) -> Tuple[Optional[Document], List[types.Diagnostic]]:
    """Parse ``text`` and return the document or the diagnostic that stopped it."""
    try:
        document = parse(text.encode("utf-8"), uri)
    except ProtoError as exc:
        logger.debug("Parse of %s failed: %s", uri, exc)
        return None, [make_diagnostic(exc, text.split("\n"), source, encoding)]
    return document, []


class ProtoLanguageServer(LanguageServer):
    """pygls server that keeps the last parse of every open document.

    Each document is reparsed from scratch whenever its text changes.
    """

    def __init__(self, options: Optional[ServerOptions] = None):
        self.options = options or ServerOptions()
        super().__init__(self.options.name, self.options.version)
        self.documents: Dict[str, Optional[Document]] = {}
        self.sources: Dict[str, str] = {}
        self.shutdown_requested = False

    def analyze(
        self,
        uri: str,
        text: str,
        encoding: str = types.PositionEncodingKind.Utf16,
    ) -> Optional[Document]:
        """Parse ``text`` and publish its diagnostics."""
        document, diagnostics = check_source(text, uri, self.options.name, encoding)
        self.documents[uri] = document
        self.sources[uri] = text
        self.publish(uri, diagnostics)
        return document

    def forget(self, uri: str) -> None:
        self.documents.pop(uri, None)
        self.sources.pop(uri, None)
        self.publish(uri, [])

    def symbols(
        self,
        uri: str,
        encoding: str = types.PositionEncodingKind.Utf16,
    ) -> List[types.DocumentSymbol]:
        document = self.documents.get(uri)
        if document is None:
            return []
        return document_symbols(document, self.sources[uri], encoding)

    def publish(self, uri: str, diagnostics: List[types.Diagnostic]) -> None:
        self.text_document_publish_diagnostics(
            types.PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
        )


def _encoding(ls: ProtoLanguageServer) -> str:
    return ls.workspace.position_encoding or types.PositionEncodingKind.Utf16


def _refresh(ls: ProtoLanguageServer, uri: str) -> None:
    # the workspace already holds the text with every change applied
    text_document = ls.workspace.get_text_document(uri)
    ls.analyze(uri, text_document.source, _encoding(ls))


def did_open(ls: ProtoLanguageServer, params: types.DidOpenTextDocumentParams):
    logger.debug("Opened %s", params.text_document.uri)
    _refresh(ls, params.text_document.uri)


def did_change(ls: ProtoLanguageServer, params: types.DidChangeTextDocumentParams):
    _refresh(ls, params.text_document.uri)


def did_close(ls: ProtoLanguageServer, params: types.DidCloseTextDocumentParams):
    logger.debug("Closed %s", params.text_document.uri)
    ls.forget(params.text_document.uri)


def shutdown(ls: ProtoLanguageServer, params: None):
    logger.info("Shutdown requested")
    ls.shutdown_requested = True


def document_symbol(
    ls: ProtoLanguageServer, params: types.DocumentSymbolParams
) -> List[types.DocumentSymbol]:
    if ls.shutdown_requested:
        raise JsonRpcInvalidRequest("Server is shutting down")
    return ls.symbols(params.text_document.uri, _encoding(ls))


def create_server(options: Optional[ServerOptions] = None) -> ProtoLanguageServer:
    """Build a server with the document features registered."""
    server = ProtoLanguageServer(options)
    server.feature(types.TEXT_DOCUMENT_DID_OPEN)(did_open)
    server.feature(types.TEXT_DOCUMENT_DID_CHANGE)(did_change)
    server.feature(types.TEXT_DOCUMENT_DID_CLOSE)(did_close)
    server.feature(types.SHUTDOWN)(shutdown)
    server.feature(types.TEXT_DOCUMENT_DOCUMENT_SYMBOL)(document_symbol)
    return server
