"""
deckls - Analysis engines for executable-talk decks

Document model, context classifier, diagnostics, completion, quick-fixes,
hover, outline and definition lookup over markdown decks with embedded
action blocks.
"""

__version__ = "1.0.0"

from .actions import ActionRegistry
from .document import DeckDocument
from .store import DeckDocumentStore
from .debounce import DebounceScheduler
from .workspace import WorkspaceFileIndex
from .log import LOG, state_connectToLogger

__all__ = [
    "ActionRegistry",
    "DeckDocument",
    "DeckDocumentStore",
    "DebounceScheduler",
    "WorkspaceFileIndex",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
