"""
deckls language server

Wires the deck analysis engines to the Language Server Protocol with pygls.
The server instance owns all per-session state: the document store, the
diagnostic debounce timers, the action catalog and the workspace index.
Handlers receive it as `ls` and never touch module-level state.

Usage:
    deckls-server            # stdio
    deckls-server --tcp      # TCP on 127.0.0.1:2087
"""

import asyncio
from argparse import ArgumentParser, ArgumentDefaultsHelpFormatter
from typing import Any, List, Optional

from lsprotocol import types as lsp
from pygls.exceptions import JsonRpcException
from pygls.lsp.server import LanguageServer

from .config import appsettings
from .lib import (
    ActionRegistry,
    DebounceScheduler,
    DeckDocumentStore,
    WorkspaceFileIndex,
    LOG,
    state_connectToLogger,
    __version__,
)
from .lib.codeactions import codeActions_get
from .lib.completion import completions_get
from .lib.definition import definition_get
from .lib.diagnostics import diagnostics_compute
from .lib.hover import hover_get
from .lib.outline import foldingRanges_build, symbols_build
from .models import CachedFile, ProgramState


WORKSPACE_FILES_REQUEST = 'executableTalk/workspaceFiles'
LAUNCH_CONFIGS_REQUEST = 'executableTalk/launchConfigs'
COMPLETION_TRIGGERS = [':', '/', ' ', '\n']


class DeckLanguageServer(LanguageServer):
    """
    Language server for executable-talk decks

    Attributes:
        store: Parsed documents keyed by URI
        debounce: Per-document timers for diagnostic publication
        registry: Action catalog consulted by every analyzer
        file_index: Workspace index, None until a workspace root is known
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault('text_document_sync_kind', lsp.TextDocumentSyncKind.Full)
        super().__init__('deckls', __version__, *args, **kwargs)
        self.store = DeckDocumentStore()
        self.debounce = DebounceScheduler(appsettings.debounce_ms)
        self.registry = ActionRegistry()
        self.file_index: Optional[WorkspaceFileIndex] = None

    def diagnostics_publish(self, uri: str) -> None:
        """Compute and push diagnostics for one open document"""
        document = self.store.get(uri)
        if document is None:
            return
        diagnostics = diagnostics_compute(document, self.registry)
        LOG(f"Publishing {len(diagnostics)} diagnostic(s) for {uri}", level=2)
        self.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(
            uri=uri,
            version=document.version,
            diagnostics=diagnostics,
        ))

    def diagnostics_clear(self, uri: str) -> None:
        self.text_document_publish_diagnostics(lsp.PublishDiagnosticsParams(uri=uri, diagnostics=[]))

    def diagnostics_schedule(self, uri: str) -> None:
        """Publish after edits settle; a newer edit restarts the timer"""
        self.debounce.schedule(uri, lambda: self.diagnostics_publish(uri))

    async def client_request(self, method: str) -> Optional[Any]:
        """
        Issue a custom request to the client

        Returns:
            The raw result, or None if the client rejected the request or
            did not answer in time
        """
        try:
            return await asyncio.wait_for(
                self.protocol.send_request_async(method, None),
                timeout=appsettings.client_request_timeout,
            )
        except JsonRpcException as e:
            LOG(f"Client rejected {method}: {e}", level=1)
        except asyncio.TimeoutError:
            LOG(f"Client did not answer {method} within {appsettings.client_request_timeout}s", level=1)
        return None

    async def fileIndex_refresh(self) -> None:
        """Repopulate the workspace index from the client"""
        if self.file_index is None:
            return
        files = self.file_index.filesPayload_load(await self.client_request(WORKSPACE_FILES_REQUEST))
        await self.launchConfigs_refresh()
        LOG(f"Workspace index: {files} file(s), {len(self.file_index.launch_configs)} launch config(s)", level=1)

    async def launchConfigs_refresh(self) -> None:
        if self.file_index is None:
            return
        self.file_index.launchConfigsPayload_load(await self.client_request(LAUNCH_CONFIGS_REQUEST))

    def session_dispose(self) -> None:
        self.debounce.dispose()
        self.store.dispose()
        if self.file_index is not None:
            self.file_index.dispose()


server = DeckLanguageServer()


def workspaceRoot_get(params: lsp.InitializeParams) -> Optional[str]:
    """First workspace folder, else the legacy root URI"""
    if params.workspace_folders:
        return params.workspace_folders[0].uri
    return params.root_uri


@server.feature(lsp.INITIALIZE)
def initialize(ls: DeckLanguageServer, params: lsp.InitializeParams) -> None:
    root = workspaceRoot_get(params)
    if root:
        ls.file_index = WorkspaceFileIndex(root)
    LOG(f"Initialized for workspace {root}", level=1)


@server.feature(lsp.INITIALIZED)
async def initialized(ls: DeckLanguageServer, params: lsp.InitializedParams) -> None:
    await ls.fileIndex_refresh()


@server.feature(lsp.SHUTDOWN)
def shutdown(ls: DeckLanguageServer, params: Any) -> None:
    ls.session_dispose()


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: DeckLanguageServer, params: lsp.DidOpenTextDocumentParams) -> None:
    document = params.text_document
    ls.store.open(document.uri, document.version, document.text)
    ls.diagnostics_publish(document.uri)


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: DeckLanguageServer, params: lsp.DidChangeTextDocumentParams) -> None:
    if not params.content_changes:
        return
    uri = params.text_document.uri
    # Full sync: the last change carries the whole text
    if ls.store.update(uri, params.text_document.version, params.content_changes[-1].text) is not None:
        ls.diagnostics_schedule(uri)


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(ls: DeckLanguageServer, params: lsp.DidCloseTextDocumentParams) -> None:
    uri = params.text_document.uri
    ls.debounce.cancel(uri)
    ls.store.close(uri)
    ls.diagnostics_clear(uri)


@server.feature(
    lsp.TEXT_DOCUMENT_COMPLETION,
    lsp.CompletionOptions(trigger_characters=COMPLETION_TRIGGERS),
)
def completion(ls: DeckLanguageServer, params: lsp.CompletionParams) -> Optional[List[lsp.CompletionItem]]:
    document = ls.store.get(params.text_document.uri)
    if document is None:
        return None
    return completions_get(document, params.position, ls.registry)


@server.feature(lsp.TEXT_DOCUMENT_HOVER)
def hover(ls: DeckLanguageServer, params: lsp.HoverParams) -> Optional[lsp.Hover]:
    document = ls.store.get(params.text_document.uri)
    if document is None:
        return None
    return hover_get(document, params.position, ls.registry)


@server.feature(lsp.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def document_symbol(ls: DeckLanguageServer, params: lsp.DocumentSymbolParams) -> List[lsp.DocumentSymbol]:
    document = ls.store.get(params.text_document.uri)
    return symbols_build(document) if document is not None else []


@server.feature(lsp.TEXT_DOCUMENT_FOLDING_RANGE)
def folding_range(ls: DeckLanguageServer, params: lsp.FoldingRangeParams) -> List[lsp.FoldingRange]:
    document = ls.store.get(params.text_document.uri)
    return foldingRanges_build(document) if document is not None else []


@server.feature(
    lsp.TEXT_DOCUMENT_CODE_ACTION,
    lsp.CodeActionOptions(code_action_kinds=[lsp.CodeActionKind.QuickFix]),
)
def code_action(ls: DeckLanguageServer, params: lsp.CodeActionParams) -> List[lsp.CodeAction]:
    document = ls.store.get(params.text_document.uri)
    if document is None:
        return []
    return codeActions_get(document, params.range, params.context.diagnostics, ls.registry)


@server.feature(lsp.TEXT_DOCUMENT_DEFINITION)
def definition(ls: DeckLanguageServer, params: lsp.DefinitionParams) -> Optional[lsp.Location]:
    document = ls.store.get(params.text_document.uri)
    if document is None:
        return None
    return definition_get(document, params.position, ls.file_index, ls.registry)


@server.feature(lsp.WORKSPACE_DID_CHANGE_WATCHED_FILES)
async def did_change_watched_files(ls: DeckLanguageServer, params: lsp.DidChangeWatchedFilesParams) -> None:
    """Keep the workspace index in step with created and deleted files"""
    index = ls.file_index
    if index is None:
        return

    launch_changed = False
    for change in params.changes:
        if change.uri.endswith('launch.json'):
            launch_changed = True
        if change.type == lsp.FileChangeType.Created:
            relative_path = index.relativePath_fromUri(change.uri)
            if relative_path is not None:
                index.file_add(CachedFile(relative_path=relative_path, uri=change.uri))
        elif change.type == lsp.FileChangeType.Deleted:
            index.file_remove(change.uri)

    if launch_changed:
        await ls.launchConfigs_refresh()


@server.feature(lsp.WORKSPACE_DID_CHANGE_CONFIGURATION)
def did_change_configuration(ls: DeckLanguageServer, params: lsp.DidChangeConfigurationParams) -> None:
    for uri in ls.store.keys():
        ls.diagnostics_publish(uri)


parser = ArgumentParser(
    description="deckls - Language server for executable-talk decks",
    formatter_class=ArgumentDefaultsHelpFormatter,
)
parser.add_argument("--tcp", action="store_true", help="Serve over TCP instead of stdio")
parser.add_argument("--host", default="127.0.0.1", type=str, help="TCP bind address")
parser.add_argument("--port", default=2087, type=int, help="TCP port")
parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase log verbosity on stderr (can be repeated: -v, -vv, -vvv)",
)
parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def main(argv: Optional[List[str]] = None) -> None:
    """Start the language server on stdio or TCP"""
    options = parser.parse_args(argv)
    state_connectToLogger(ProgramState(verbosity=options.verbosity))

    if options.tcp:
        LOG(f"deckls {__version__} listening on {options.host}:{options.port}", level=1)
        server.start_tcp(options.host, options.port)
    else:
        LOG(f"deckls {__version__} on stdio", level=1)
        server.start_io()


if __name__ == "__main__":
    main()
