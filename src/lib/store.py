"""
Per-URI cache of parsed deck documents

Owned by the language server instance and handed to every handler, so
documents of one server never leak into another.
"""

from typing import Dict, List, Optional

from .document import DeckDocument
from .log import LOG


class DeckDocumentStore:
    """Open documents keyed by URI; each entry is replaced wholesale on change"""

    def __init__(self) -> None:
        self.documents: Dict[str, DeckDocument] = {}

    def open(self, uri: str, version: int, content: str) -> DeckDocument:
        """Parse and cache a newly opened document"""
        document = DeckDocument.create(uri, version, content)
        self.documents[uri] = document
        LOG(f"Opened {uri} (v{version}, {len(document.slides)} slides)", level=2)
        return document

    def update(self, uri: str, version: int, content: str) -> Optional[DeckDocument]:
        """
        Re-parse a cached document with its full new text

        Returns:
            The new document, or None if *uri* was never opened
        """
        previous = self.documents.get(uri)
        if previous is None:
            LOG(f"Change for unknown document {uri} ignored", level=2)
            return None
        document = DeckDocument.change_apply(previous, version, content)
        self.documents[uri] = document
        LOG(f"Re-parsed {uri} (v{version})", level=3)
        return document

    def close(self, uri: str) -> None:
        """Drop a document from the cache"""
        self.documents.pop(uri, None)
        LOG(f"Closed {uri}", level=2)

    def get(self, uri: str) -> Optional[DeckDocument]:
        return self.documents.get(uri)

    def has(self, uri: str) -> bool:
        return uri in self.documents

    def keys(self) -> List[str]:
        return list(self.documents.keys())

    def dispose(self) -> None:
        self.documents.clear()
