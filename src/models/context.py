"""
Cursor context models

The context classifier answers "what is the author typing here?" with one of
the variants below. Each variant is its own dataclass carrying only the
fields meaningful to it; `kind` is the discriminator callers switch on.
"""

from dataclasses import dataclass, field
from typing import List, Literal, Union

from lsprotocol.types import Range

from .document import ActionBlock, StepRange


@dataclass
class TypeValueContext:
    """Cursor on (or where there should be) an action `type:` value"""
    block: ActionBlock
    partial_value: str
    replace_range: Range
    kind: Literal['type-value'] = field(default='type-value', init=False)


@dataclass
class ParamNameContext:
    """Cursor where a new parameter key can be inserted"""
    block: ActionBlock
    action_type: str
    existing_params: List[str]
    insert_range: Range
    kind: Literal['param-name'] = field(default='param-name', init=False)


@dataclass
class ParamValueContext:
    """Cursor inside the value of a `key: value` line"""
    block: ActionBlock
    action_type: str
    param_name: str
    partial_value: str
    replace_range: Range
    kind: Literal['param-value'] = field(default='param-value', init=False)


InnerContext = Union[TypeValueContext, ParamNameContext, ParamValueContext]


@dataclass
class StepContext:
    """Cursor inside one step of a sequence; `inner_context` is relative to the step"""
    block: ActionBlock
    step: StepRange
    inner_context: InnerContext
    kind: Literal['step-context'] = field(default='step-context', init=False)


@dataclass
class UnknownContext:
    """Cursor outside any action block"""
    kind: Literal['unknown'] = field(default='unknown', init=False)


ActionContext = Union[
    TypeValueContext,
    ParamNameContext,
    ParamValueContext,
    StepContext,
    UnknownContext,
]
