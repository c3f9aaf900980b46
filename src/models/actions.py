"""
Action specification and metadata models

Defines the declared schema of deck action types: their parameters, value
types, and authoring hints. The analysis engine only reads these specs; it
never executes an action.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set


class CompletionKind(Enum):
    """
    Hint describing where values for a parameter come from

    Used by completion and go-to-definition to decide what a value refers to.
    """
    FILE = "file"                    # workspace-relative path
    LAUNCH_CONFIG = "launchConfig"   # name of a launch.json configuration
    ENUM = "enum"                    # one of ParameterSpec.enum
    TEXT = "text"                    # free-form


class ParameterType(Enum):
    """Declared value type of an action parameter"""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


@dataclass
class ParameterSpec:
    """
    Specification for a single action parameter

    Attributes:
        name: Parameter key as written in the action block (e.g., "path")
        type: Declared value type
        required: Whether the parameter must be present
        description: Human-readable description for hover/completion docs
        enum: Allowed values for enumerated parameters
        completion_kind: Hint for completion and definition lookups
    """
    name: str
    type: ParameterType
    required: bool = False
    description: str = ""
    enum: Optional[List[str]] = None
    completion_kind: Optional[CompletionKind] = None


@dataclass
class ActionSpec:
    """
    Specification for a deck action type

    Attributes:
        type: Dotted action identifier (e.g., "file.open")
        description: Human-readable description for hover docs
        requires_trust: Whether executing the action needs workspace trust
        parameters: Declared parameters, in documentation order
    """
    type: str
    description: str
    requires_trust: bool = False
    parameters: List[ParameterSpec] = field(default_factory=list)

    def parameter_get(self, name: str) -> Optional[ParameterSpec]:
        """Return the parameter spec named *name*, or None"""
        for parameter in self.parameters:
            if parameter.name == name:
                return parameter
        return None

    def requiredNames_get(self) -> List[str]:
        """Names of all required parameters"""
        return [p.name for p in self.parameters if p.required]

    def names_get(self) -> List[str]:
        """Names of all declared parameters"""
        return [p.name for p in self.parameters]


# Keys permitted in any action block or link but never declared in a schema
META_FIELDS: Set[str] = {
    'type',
    'label',
    'description',
}


# Render directives only ever carry one of these types
RENDER_TYPE_DESCRIPTIONS: Dict[str, str] = {
    'file': 'Renders the contents of a file inline in the slide.',
    'command': 'Renders the output of a shell command inline in the slide.',
    'diff': 'Renders a diff view between two files or content blocks.',
}

RENDER_PARAMETERS: Dict[str, Set[str]] = {
    'file': {'path', 'lines', 'startPattern', 'endPattern', 'format', 'lang', 'watch'},
    'command': {'cmd', 'timeout', 'format', 'cwd', 'shell', 'cached', 'onError',
                'fallback', 'retries', 'stream'},
    'diff': {'path', 'before', 'after', 'left', 'right', 'mode', 'context'},
}


def metaField_is(key: str) -> bool:
    """Check if a key is a universally permitted meta field"""
    return key in META_FIELDS
