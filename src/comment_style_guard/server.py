from __future__ import annotations

import logging
import threading
from typing import Callable, Sequence

from lsprotocol import types as lsp
from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_CLOSE,
    TEXT_DOCUMENT_DID_OPEN,
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    PublishDiagnosticsParams,
    TextDocumentContentChangeWholeDocument,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer
from pygls.workspace import PositionCodec

from comment_style_guard import __version__
from comment_style_guard.core import Diagnostic, Position, compute_diagnostics, scan_lines

logger = logging.getLogger(__name__)

SERVER_NAME = "comment-style-guard"


class DocumentStore:
    """Latest full text per document URI.

    Writes replace a snapshot wholesale and every read returns one complete
    snapshot. Handlers evaluate the snapshot read back from here.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._texts: dict[str, str] = {}

    def put(self, uri: str, text: str) -> None:
        with self._lock:
            self._texts[uri] = text

    def get(self, uri: str) -> str | None:
        with self._lock:
            return self._texts.get(uri)

    def pop(self, uri: str) -> str | None:
        with self._lock:
            return self._texts.pop(uri, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._texts)


def _client_position(position: Position, lines: Sequence[str], codec: PositionCodec) -> lsp.Position:
    return codec.position_to_client_units(
        lines, lsp.Position(line=position.line, character=position.character)
    )


def to_lsp_diagnostic(diagnostic: Diagnostic, lines: Sequence[str], codec: PositionCodec | None = None) -> lsp.Diagnostic:
    """Convert a diagnostic, re-encoding columns into the client's units (UTF-16 by default)."""
    codec = codec or PositionCodec()
    return lsp.Diagnostic(
        range=lsp.Range(
            start=_client_position(diagnostic.range.start, lines, codec),
            end=_client_position(diagnostic.range.end, lines, codec),
        ),
        message=diagnostic.message,
        severity=lsp.DiagnosticSeverity(int(diagnostic.severity)),
        code=int(diagnostic.code),
        source=SERVER_NAME,
    )


def _publish(ls: LanguageServer, uri: str, diagnostics: list[lsp.Diagnostic], version: int | None = None) -> None:
    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics, version=version)
    )


def _evaluate_and_publish(ls: CommentStyleServer, uri: str, version: int | None) -> None:
    text = ls.documents.get(uri)
    if text is None:
        return
    lines = scan_lines(text).items
    codec = ls.workspace.position_codec
    diagnostics = [to_lsp_diagnostic(d, lines, codec) for d in compute_diagnostics(text)]
    logger.debug(f"{uri}: {len(diagnostics)} diagnostics (version {version})")
    _publish(ls, uri, diagnostics, version)


def _changed_text(ls: LanguageServer, params: DidChangeTextDocumentParams) -> str | None:
    if not params.content_changes:
        return None
    last = params.content_changes[-1]
    if isinstance(last, TextDocumentContentChangeWholeDocument):
        return last.text
    # Range edits: the workspace has already applied every change in order.
    return ls.workspace.get_text_document(params.text_document.uri).source


class CommentStyleServer(LanguageServer):
    """Language server that keeps one text snapshot per open document."""

    def __init__(self, store: DocumentStore | None = None) -> None:
        super().__init__(SERVER_NAME, __version__, text_document_sync_kind=TextDocumentSyncKind.Full)
        self.documents = store if store is not None else DocumentStore()


def did_open(ls: CommentStyleServer, params: DidOpenTextDocumentParams) -> None:
    doc = params.text_document
    logger.info(f"Opened {doc.uri}")
    ls.documents.put(doc.uri, doc.text)
    _evaluate_and_publish(ls, doc.uri, doc.version)


def did_change(ls: CommentStyleServer, params: DidChangeTextDocumentParams) -> None:
    doc = params.text_document
    text = _changed_text(ls, params)
    if text is None:
        logger.warning(f"Ignoring change to {doc.uri} without content changes")
        return
    ls.documents.put(doc.uri, text)
    _evaluate_and_publish(ls, doc.uri, doc.version)


def did_close(ls: CommentStyleServer, params: DidCloseTextDocumentParams) -> None:
    uri = params.text_document.uri
    logger.info(f"Closed {uri}")
    ls.documents.pop(uri)
    _publish(ls, uri, [])


def create_server(store: DocumentStore | None = None) -> CommentStyleServer:
    """Build a language server that publishes comment style diagnostics."""
    server = CommentStyleServer(store)
    server.feature(TEXT_DOCUMENT_DID_OPEN)(did_open)
    server.feature(TEXT_DOCUMENT_DID_CHANGE)(did_change)
    server.feature(TEXT_DOCUMENT_DID_CLOSE)(did_close)
    return server


def start(
    server: LanguageServer | None = None,
    *,
    tcp: bool = False,
    host: str = "127.0.0.1",
    port: int = 2087,
    start_fn: Callable[[LanguageServer], None] | None = None,
) -> None:
    """Start the language server over stdio, or TCP when ``tcp`` is set."""
    server = server or create_server()
    if start_fn is not None:
        start_fn(server)
    elif tcp:
        logger.info(f"Serving on {host}:{port}")
        server.start_tcp(host, port)
    else:
        logger.info("Serving on stdio")
        server.start_io()
