"""
deckls - Language server and linter for executable-talk decks

Authoring assistance for markdown decks whose slides embed ```action YAML
blocks, inline [label](action:...) links and [label](render:...) directives.
"""

from .lib import (
    ActionRegistry,
    DeckDocument,
    DeckDocumentStore,
    LOG,
    state_connectToLogger,
    __version__,
)

__all__ = [
    "ActionRegistry",
    "DeckDocument",
    "DeckDocumentStore",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
