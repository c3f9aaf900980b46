"""
Models package for deckls

Data structures for the document model, the action catalog, cursor
contexts, the workspace index and the lint pipeline.
"""

from .state import ProgramState, pipeline
from .actions import ActionSpec, ParameterSpec, ParameterType, CompletionKind, META_FIELDS
from .document import ActionBlock, ActionLink, RenderDirective, Slide, StepRange, ParameterRange
from .workspace import CachedFile, CachedLaunchConfig

__all__ = [
    "ProgramState",
    "pipeline",
    "ActionSpec",
    "ParameterSpec",
    "ParameterType",
    "CompletionKind",
    "META_FIELDS",
    "ActionBlock",
    "ActionLink",
    "RenderDirective",
    "Slide",
    "StepRange",
    "ParameterRange",
    "CachedFile",
    "CachedLaunchConfig",
]
