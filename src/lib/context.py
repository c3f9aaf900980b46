"""
Cursor context classification

Given a position inside a deck, decides which kind of authoring help applies:
choosing an action type, naming a parameter, filling in a parameter value,
or one of those inside a sequence step.
"""

import re
from typing import List, Optional

from lsprotocol.types import Position

from ..config import appsettings
from ..models.context import (
    ActionContext,
    InnerContext,
    ParamNameContext,
    ParamValueContext,
    StepContext,
    TypeValueContext,
    UnknownContext,
)
from ..models.document import ActionBlock, StepRange, contains_position, range_make
from .document import DeckDocument
from .yamlfragment import valueStart_find


BLOCK_TYPE_LINE = re.compile(r'^(\s*)type:\s*(.*)')
BLOCK_PARAMETER_LINE = re.compile(r'^(\s*)(\w[\w.]*)\s*:\s*(.*)')
STEP_TYPE_LINE = re.compile(r'(?:^\s*-\s+|\s+)type:\s*(.*)')
STEP_PARAMETER_LINE = re.compile(r'^\s{2,}(\w+):\s*(.*)')


def context_detect(document: DeckDocument, position: Position) -> ActionContext:
    """
    Classify the cursor position

    Args:
        document: Parsed deck
        position: Cursor position

    Returns:
        One ActionContext variant; UnknownContext outside action blocks
    """
    block = document.actionBlock_findAt(position)
    if block is None:
        return UnknownContext()

    line = document.line_get(position.line)

    if block.action_type == appsettings.sequence_type and block.steps:
        for step in block.steps:
            if contains_position(step.range, position):
                return StepContext(
                    block=block,
                    step=step,
                    inner_context=innerContext_detect(block, step, line, position),
                )

    type_match = BLOCK_TYPE_LINE.match(line)
    if type_match:
        value_start = valueStart_find(line, line.index(':'))
        partial = type_match.group(2).strip()
        return TypeValueContext(
            block=block,
            partial_value=partial,
            replace_range=range_make(position.line, value_start, position.line, value_start + len(partial)),
        )

    param_match = BLOCK_PARAMETER_LINE.match(line)
    if param_match and block.action_type:
        context = paramValue_detect(
            block, block.action_type, line, position,
            param_match.group(2), param_match.end(2), param_match.group(3),
        )
        if context is not None:
            return context

    if block.action_type:
        return ParamNameContext(
            block=block,
            action_type=block.action_type,
            existing_params=[p.key for p in block.parameters],
            insert_range=range_make(position.line, 0, position.line, len(line)),
        )

    return TypeValueContext(
        block=block,
        partial_value='',
        replace_range=range_make(position.line, 0, position.line, len(line)),
    )


def innerContext_detect(block: ActionBlock, step: StepRange, line: str, position: Position) -> InnerContext:
    """
    Classify the cursor relative to one sequence step

    Mirrors the block-level rules, anchored to the step's own `type:` and
    `key:` occurrences. A step without a type yet offers type completion.
    """
    type_match = STEP_TYPE_LINE.search(line)
    if type_match:
        value_start = valueStart_find(line, line.index('type:') + 4)
        partial = type_match.group(1).strip()
        return TypeValueContext(
            block=block,
            partial_value=partial,
            replace_range=range_make(position.line, value_start, position.line, value_start + len(partial)),
        )

    param_match = STEP_PARAMETER_LINE.match(line)
    if param_match and step.action_type:
        context = paramValue_detect(
            block, step.action_type, line, position,
            param_match.group(1), param_match.end(1), param_match.group(2),
        )
        if context is not None:
            return context

    if step.action_type:
        existing: List[str] = [p.key for p in step.parameters]
        return ParamNameContext(
            block=block,
            action_type=step.action_type,
            existing_params=existing + ['type'],
            insert_range=range_make(position.line, 0, position.line, len(line)),
        )

    return TypeValueContext(
        block=block,
        partial_value='',
        replace_range=range_make(position.line, 0, position.line, len(line)),
    )


def paramValue_detect(
    block: ActionBlock,
    action_type: str,
    line: str,
    position: Position,
    key: str,
    key_end: int,
    value_text: str,
) -> Optional[ParamValueContext]:
    """ParamValueContext if the cursor sits in the value of a non-type `key: value` line"""
    if key == 'type':
        return None
    value_start = valueStart_find(line, line.index(':', key_end))
    if position.character < value_start:
        return None
    return ParamValueContext(
        block=block,
        action_type=action_type,
        param_name=key,
        partial_value=value_text.strip(),
        replace_range=range_make(
            position.line, value_start,
            position.line, value_start + len(value_text.rstrip()),
        ),
    )
