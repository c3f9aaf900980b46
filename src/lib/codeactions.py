"""
Quick-fix engine

Builds text edits for diagnostics reported by diagnostics.py:
    ET003/ET007  replace an unknown action type with a near-miss catalog type
    ET004/ET008  insert a missing required parameter
    ET005/ET009  delete an unknown parameter line

The offending name is read back out of the diagnostic message, so the
patterns below track the message texts emitted in diagnostics.py.
"""

import re
from typing import List, Optional

from lsprotocol.types import (
    CodeAction,
    CodeActionKind,
    Diagnostic,
    Position,
    Range,
    TextEdit,
    WorkspaceEdit,
)

from ..config import appsettings
from ..models.document import ActionBlock, ParameterRange, StepRange, contains_position, range_make
from .actions import ActionRegistry
from .diagnostics import (
    MISSING_REQUIRED_PARAM,
    STEP_MISSING_REQUIRED_PARAM,
    STEP_UNKNOWN_PARAM,
    STEP_UNKNOWN_TYPE,
    UNKNOWN_PARAM,
    UNKNOWN_TYPE,
)
from .document import DeckDocument
from .log import LOG


UNKNOWN_TYPE_MESSAGE = re.compile(r"Unknown action type(?: in step)?: '([^']+)'")
MISSING_PARAM_MESSAGE = re.compile(r"[Mm]issing required parameter: '([^']+)'")
UNKNOWN_PARAM_MESSAGE = re.compile(r"Unknown parameter '([^']+)'")
STEP_MARKER = re.compile(r'^(\s*)-(\s+)')


def levenshtein(a: str, b: str) -> int:
    """
    Edit distance between two strings

    Insertion, deletion and substitution each cost 1. Uses a single DP row.

    Example:
        >>> levenshtein("file.opn", "file.open")
        1
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    row = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        diagonal = row[0]
        row[0] = i
        for j, char_b in enumerate(b, start=1):
            above = row[j]
            row[j] = min(
                above + 1,
                row[j - 1] + 1,
                diagonal + (0 if char_a == char_b else 1),
            )
            diagonal = above
    return row[-1]


def codeActions_get(
    document: DeckDocument,
    range: Range,
    diagnostics: List[Diagnostic],
    registry: Optional[ActionRegistry] = None,
) -> List[CodeAction]:
    """
    Quick-fixes for the diagnostics the client sent with a code action request

    Args:
        document: Parsed deck the diagnostics belong to
        range: Requested range (fixes are driven by *diagnostics* alone)
        diagnostics: Diagnostics in the requested range
        registry: Action catalog

    Returns:
        Code actions whose edits target document.uri
    """
    registry = registry or ActionRegistry()
    actions: List[CodeAction] = []

    for diagnostic in diagnostics:
        if diagnostic.code in (UNKNOWN_TYPE, STEP_UNKNOWN_TYPE):
            actions.extend(typoCorrections_get(document, diagnostic, registry))
        elif diagnostic.code in (MISSING_REQUIRED_PARAM, STEP_MISSING_REQUIRED_PARAM):
            actions.extend(missingParamInsertions_get(document, diagnostic))
        elif diagnostic.code in (UNKNOWN_PARAM, STEP_UNKNOWN_PARAM):
            actions.extend(unknownParamRemovals_get(document, diagnostic))

    return actions


def quickFix_make(
    document: DeckDocument,
    title: str,
    diagnostic: Diagnostic,
    edit: TextEdit,
    preferred: Optional[bool] = None,
) -> CodeAction:
    return CodeAction(
        title=title,
        kind=CodeActionKind.QuickFix,
        diagnostics=[diagnostic],
        edit=WorkspaceEdit(changes={document.uri: [edit]}),
        is_preferred=preferred,
    )


def typoCorrections_get(
    document: DeckDocument, diagnostic: Diagnostic, registry: ActionRegistry
) -> List[CodeAction]:
    """One replacement per catalog type within the configured edit distance"""
    match = UNKNOWN_TYPE_MESSAGE.search(diagnostic.message)
    if not match:
        return []

    unknown = match.group(1)
    edit_range = identifierRange_find(document, diagnostic.range, unknown)
    if edit_range is None:
        LOG(f"'{unknown}' not found inside its diagnostic range; no typo fix", level=3)
        return []

    suggestions = [
        known for known in registry.types_list()
        if levenshtein(unknown, known) <= appsettings.typo_distance_max
    ]
    LOG(f"Typo candidates for '{unknown}': {suggestions}", level=3)

    return [
        quickFix_make(
            document,
            f"Change to '{suggestion}'",
            diagnostic,
            TextEdit(range=edit_range, new_text=suggestion),
            preferred=len(suggestions) == 1,
        )
        for suggestion in suggestions
    ]


def identifierRange_find(document: DeckDocument, search_range: Range, identifier: str) -> Optional[Range]:
    """
    Span of *identifier* within *search_range*

    A diagnostic range can be coarser than the identifier (a flow mapping
    has no `type:` line of its own), so the edit is narrowed to the first
    standalone occurrence. None if the identifier is not there.
    """
    pattern = re.compile(r'(?<![\w.])' + re.escape(identifier) + r'(?![\w.])')
    first, last = search_range.start.line, search_range.end.line
    for line_number in range(first, last + 1):
        line = document.line_get(line_number)
        start = search_range.start.character if line_number == first else 0
        end = search_range.end.character if line_number == last else len(line)
        match = pattern.search(line, start, end)
        if match:
            return range_make(line_number, match.start(), line_number, match.end())
    return None


def step_findAt(block: ActionBlock, position: Position) -> Optional[StepRange]:
    for step in block.steps:
        if contains_position(step.range, position):
            return step
    return None


def stepIndent_get(document: DeckDocument, step: StepRange) -> str:
    """Indentation that aligns a new key under the step's `type:` key"""
    marker = STEP_MARKER.match(document.line_get(step.range.start.line))
    if not marker:
        return '    '
    return ' ' * (len(marker.group(1)) + 1 + len(marker.group(2)))


def missingParamInsertions_get(document: DeckDocument, diagnostic: Diagnostic) -> List[CodeAction]:
    """
    Insert `<name>: ` after the last parameter

    Falls back to the line after `type:`, then to the content start. For a
    step diagnostic the insertion happens inside the owning step, indented
    to match its keys.
    """
    match = MISSING_PARAM_MESSAGE.search(diagnostic.message)
    if not match:
        return []
    param_name = match.group(1)

    block = document.actionBlock_findAt(diagnostic.range.start)
    if block is None:
        return []

    step = step_findAt(block, diagnostic.range.start) if diagnostic.code == STEP_MISSING_REQUIRED_PARAM else None
    if step is not None:
        indent = stepIndent_get(document, step)
        if step.parameters:
            insert_line = step.parameters[-1].line_range.end.line + 1
        elif step.type_range is not None:
            insert_line = step.type_range.end.line + 1
        else:
            insert_line = step.range.start.line + 1
    else:
        indent = ''
        if block.parameters:
            insert_line = block.parameters[-1].line_range.end.line + 1
        elif block.type_range is not None:
            insert_line = block.type_range.end.line + 1
        else:
            insert_line = block.content_range.start.line

    return [quickFix_make(
        document,
        f"Add missing parameter '{param_name}'",
        diagnostic,
        TextEdit(range=range_make(insert_line, 0, insert_line, 0), new_text=f"{indent}{param_name}: \n"),
    )]


def parameter_findAt(block: ActionBlock, position: Position) -> Optional[ParameterRange]:
    """Block or step parameter whose key range contains *position*"""
    candidates = list(block.parameters)
    for step in block.steps:
        candidates.extend(step.parameters)
    for param in candidates:
        if contains_position(param.key_range, position):
            return param
    return None


def unknownParamRemovals_get(document: DeckDocument, diagnostic: Diagnostic) -> List[CodeAction]:
    """Delete the whole line of an unknown parameter, or the diagnostic's line if it cannot be found"""
    match = UNKNOWN_PARAM_MESSAGE.search(diagnostic.message)
    if not match:
        return []

    block = document.actionBlock_findAt(diagnostic.range.start)
    param = parameter_findAt(block, diagnostic.range.start) if block is not None else None
    if param is not None:
        first_line, last_line = param.line_range.start.line, param.line_range.end.line
    else:
        LOG(f"Parameter '{match.group(1)}' not re-located; removing diagnostic line", level=3)
        first_line = last_line = diagnostic.range.start.line

    return [quickFix_make(
        document,
        f"Remove unknown parameter '{match.group(1)}'",
        diagnostic,
        TextEdit(range=range_make(first_line, 0, last_line + 1, 0), new_text=''),
    )]
