import threading
from types import SimpleNamespace

from lsprotocol import types as lsp

from pygls.workspace import PositionCodec

from comment_style_guard.core import RICK_ROLL_URL, Diagnostic, DiagnosticCode
from comment_style_guard.server import (
    SERVER_NAME,
    CommentStyleServer,
    DocumentStore,
    create_server,
    did_change,
    did_close,
    did_open,
    to_lsp_diagnostic,
)

URI = "file:///tmp/comment.md"


class StubWorkspace:
    def __init__(self):
        self.texts: dict[str, str] = {}
        self.position_codec = PositionCodec(encoding=lsp.PositionEncodingKind.Utf16)

    def get_text_document(self, uri):
        return SimpleNamespace(source=self.texts[uri])


class StubServer:
    def __init__(self):
        self.documents = DocumentStore()
        self.workspace = StubWorkspace()
        self.published: list[lsp.PublishDiagnosticsParams] = []

    def text_document_publish_diagnostics(self, params):
        self.published.append(params)


def _open(ls, text, version=1):
    did_open(
        ls,
        lsp.DidOpenTextDocumentParams(
            text_document=lsp.TextDocumentItem(uri=URI, language_id="markdown", version=version, text=text)
        ),
    )


def _change(ls, changes, version=2):
    did_change(
        ls,
        lsp.DidChangeTextDocumentParams(
            text_document=lsp.VersionedTextDocumentIdentifier(uri=URI, version=version),
            content_changes=changes,
        ),
    )


def _codes(params):
    return [d.code for d in params.diagnostics]


class TestDocumentStore:
    def test_put_get_pop(self):
        store = DocumentStore()
        assert store.get(URI) is None
        store.put(URI, "one")
        store.put(URI, "two")
        assert store.get(URI) == "two"
        assert len(store) == 1
        assert store.pop(URI) == "two"
        assert store.pop(URI) is None
        assert len(store) == 0

    def test_keyed_by_uri(self):
        store = DocumentStore()
        store.put("file:///a", "a")
        store.put("file:///b", "b")
        assert store.get("file:///a") == "a"
        assert store.get("file:///b") == "b"

    def test_readers_only_see_whole_snapshots(self):
        store = DocumentStore()
        snapshots = ["import a\n" + ("x;\n" * n) + "return" for n in range(50)]
        store.put(URI, snapshots[0])
        seen: list[str] = []

        def writer():
            for text in snapshots:
                store.put(URI, text)

        def reader():
            for _ in range(200):
                seen.append(store.get(URI))

        threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert all(text in snapshots for text in seen)


class TestHandlers:
    def test_open_publishes_diagnostics(self):
        ls = StubServer()
        _open(ls, "hello", version=3)
        [params] = ls.published
        assert params.uri == URI
        assert params.version == 3
        assert _codes(params) == [2, 3]
        assert ls.documents.get(URI) == "hello"

    def test_open_clean_document_publishes_empty_list(self):
        ls = StubServer()
        _open(ls, "import x\nfine;\nreturn")
        assert ls.published[0].diagnostics == []

    def test_full_change_replaces_snapshot(self):
        ls = StubServer()
        _open(ls, "hello")
        _change(ls, [lsp.TextDocumentContentChangeWholeDocument(text="import x\nreturn")])
        assert ls.documents.get(URI) == "import x\nreturn"
        assert ls.published[-1].diagnostics == []
        assert ls.published[-1].version == 2

    def test_last_full_change_wins(self):
        ls = StubServer()
        _change(
            ls,
            [
                lsp.TextDocumentContentChangeWholeDocument(text="import x\nreturn"),
                lsp.TextDocumentContentChangeWholeDocument(text="nope"),
            ],
        )
        assert ls.documents.get(URI) == "nope"
        assert _codes(ls.published[-1]) == [2, 3]

    def test_range_change_reads_synchronised_workspace(self):
        ls = StubServer()
        ls.workspace.texts[URI] = "import x\n[a](https://a.com);\nreturn"
        edit = lsp.TextDocumentContentChangePartial(
            range=lsp.Range(start=lsp.Position(line=0, character=0), end=lsp.Position(line=0, character=0)),
            text="",
        )
        _change(ls, [edit])
        assert _codes(ls.published[-1]) == [5]

    def test_change_without_content_is_ignored(self):
        ls = StubServer()
        _open(ls, "hello")
        _change(ls, [])
        assert len(ls.published) == 1
        assert ls.documents.get(URI) == "hello"

    def test_close_clears_diagnostics(self):
        ls = StubServer()
        _open(ls, "hello")
        did_close(ls, lsp.DidCloseTextDocumentParams(text_document=lsp.TextDocumentIdentifier(uri=URI)))
        assert ls.published[-1].diagnostics == []
        assert ls.documents.get(URI) is None

    def test_range_edit_after_full_change_uses_workspace(self):
        ls = StubServer()
        ls.workspace.texts[URI] = "import x\nreturn"
        edit = lsp.TextDocumentContentChangePartial(
            range=lsp.Range(start=lsp.Position(line=0, character=0), end=lsp.Position(line=0, character=5)),
            text="import x\nreturn",
        )
        _change(ls, [lsp.TextDocumentContentChangeWholeDocument(text="hello"), edit])
        assert ls.documents.get(URI) == "import x\nreturn"
        assert ls.published[-1].diagnostics == []

    def test_columns_are_utf16_code_units(self):
        ls = StubServer()
        _open(ls, "import \U0001f600 [x](https://a.com)\nreturn")
        [diag] = ls.published[0].diagnostics
        assert diag.code == 5
        assert diag.range.start == lsp.Position(line=0, character=10)
        assert diag.range.end == diag.range.start

    def test_semicolon_column_after_emoji(self):
        ls = StubServer()
        _open(ls, "import x\n\U0001f600\U0001f600 no semicolon\nreturn")
        [diag] = ls.published[0].diagnostics
        assert diag.code == 4
        # code points: 15 - 2 = 13; each emoji adds one UTF-16 unit.
        assert diag.range.start.character == 15


class TestConversion:
    def test_to_lsp_diagnostic(self):
        lines = ["import", "", "", "", "caf\u00e9 [x](https://a.com)"]
        converted = to_lsp_diagnostic(Diagnostic.at(DiagnosticCode.RICK_ROLL, 4, 7), lines)
        assert converted.code == 5
        assert converted.severity == lsp.DiagnosticSeverity.Error
        assert converted.source == SERVER_NAME
        assert converted.range.start == lsp.Position(line=4, character=7)
        assert converted.range.end == converted.range.start
        assert "rick-roll" in converted.message

    def test_rick_roll_pair_publishes_nothing(self):
        ls = StubServer()
        _open(ls, f"import [x](https://a.com)\n[x]({RICK_ROLL_URL});\nreturn")
        assert ls.published[0].diagnostics == []


class TestCreateServer:
    def test_uses_given_store(self):
        store = DocumentStore()
        server = create_server(store)
        assert isinstance(server, CommentStyleServer)
        assert server.documents is store
        assert server.name == SERVER_NAME
