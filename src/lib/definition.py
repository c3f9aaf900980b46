"""
Go-to-definition for file paths and launch configuration names

Resolution goes through the WorkspaceFileIndex; without an index nothing
resolves.
"""

from typing import List, Optional

from lsprotocol.types import Location, Position

from ..models.actions import CompletionKind
from ..models.document import ParameterRange, contains_position, range_make
from .actions import ActionRegistry
from .document import DeckDocument
from .workspace import WorkspaceFileIndex


def definition_get(
    document: DeckDocument,
    position: Position,
    index: Optional[WorkspaceFileIndex],
    registry: Optional[ActionRegistry] = None,
) -> Optional[Location]:
    """
    Definition of the value under the cursor

    Covers action block and step parameters whose catalog entry marks them
    as file paths or launch configurations, and the `path` query value of
    inline action links.

    Args:
        document: Parsed deck
        position: Cursor position
        index: Workspace index, or None before the client answered
        registry: Action catalog

    Returns:
        Location of the file start or the launch.json entry, or None
    """
    if index is None:
        return None
    registry = registry or ActionRegistry()

    for slide in document.slides:
        for block in slide.action_blocks:
            if contains_position(block.content_range, position):
                location = parameterDefinition_get(registry, index, block.action_type, block.parameters, position)
                if location is not None:
                    return location
            for step in block.steps:
                if contains_position(step.range, position):
                    location = parameterDefinition_get(registry, index, step.action_type, step.parameters, position)
                    if location is not None:
                        return location

        for link in slide.action_links:
            if not contains_position(link.range, position):
                continue
            path = link.params.get('path')
            if path is not None and contains_position(path.range, position):
                uri = index.uri_resolve(path.value)
                if uri:
                    return Location(uri=uri, range=range_make(0, 0, 0, 0))

    return None


def parameterDefinition_get(
    registry: ActionRegistry,
    index: WorkspaceFileIndex,
    action_type: Optional[str],
    parameters: List[ParameterRange],
    position: Position,
) -> Optional[Location]:
    spec = registry.spec_get(action_type) if action_type else None
    if spec is None:
        return None

    for param in parameters:
        if not contains_position(param.value_range, position):
            continue
        param_spec = spec.parameter_get(param.key)
        if param_spec is None:
            continue
        if param_spec.completion_kind == CompletionKind.FILE:
            uri = index.uri_resolve(str(param.value))
            if uri:
                return Location(uri=uri, range=range_make(0, 0, 0, 0))
        elif param_spec.completion_kind == CompletionKind.LAUNCH_CONFIG:
            location = index.launchConfig_resolve(str(param.value))
            if location is not None:
                return location

    return None
