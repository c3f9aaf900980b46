"""
Completion engine

Turns an inline-link prefix, a render-directive prefix, or a classified
cursor context into completion items with exact replacement ranges.
"""

import re
from typing import List, Optional

from lsprotocol.types import (
    CompletionItem,
    CompletionItemKind,
    InsertTextFormat,
    Position,
    Range,
    TextEdit,
)

from ..config import appsettings
from ..models.actions import RENDER_TYPE_DESCRIPTIONS, ParameterType
from ..models.context import ActionContext
from ..models.document import range_make
from .actions import ActionRegistry
from .context import context_detect
from .document import DeckDocument


INLINE_LINK_PREFIX = re.compile(r'\[[^\]]*\]\(action:([a-z.]*)$')
RENDER_PREFIX = re.compile(r'\[[^\]]*\]\(render:([a-z]*)$')


def completions_get(
    document: DeckDocument,
    position: Position,
    registry: Optional[ActionRegistry] = None,
) -> Optional[List[CompletionItem]]:
    """
    Completion candidates at *position*

    Tried in order: an inline `(action:` prefix, a `(render:` prefix, then
    the action-block context classifier.

    Returns:
        Items, or None when nothing applies
    """
    registry = registry or ActionRegistry()
    line = document.line_get(position.line)
    before_cursor = line[:position.character]

    match = INLINE_LINK_PREFIX.search(before_cursor)
    if match:
        partial = match.group(1)
        return typeItems_build(registry, partial, prefix_range(position, partial), False)

    match = RENDER_PREFIX.search(before_cursor)
    if match:
        partial = match.group(1)
        return renderTypeItems_build(partial, prefix_range(position, partial))

    return contextItems_build(registry, context_detect(document, position))


def prefix_range(position: Position, partial: str) -> Range:
    """Range from the start of a typed prefix to the cursor"""
    return range_make(position.line, position.character - len(partial), position.line, position.character)


def contextItems_build(registry: ActionRegistry, context: ActionContext) -> Optional[List[CompletionItem]]:
    if context.kind == 'type-value':
        return typeItems_build(registry, context.partial_value, context.replace_range, False)
    if context.kind == 'param-name':
        return paramNameItems_build(registry, context.action_type, context.existing_params, context.insert_range)
    if context.kind == 'param-value':
        return paramValueItems_build(registry, context.action_type, context.param_name, context.replace_range)
    if context.kind == 'step-context':
        inner = context.inner_context
        if inner.kind == 'type-value':
            return typeItems_build(registry, inner.partial_value, inner.replace_range, True)
        return contextItems_build(registry, inner)
    return None


def typeItems_build(
    registry: ActionRegistry,
    partial: str,
    replace_range: Range,
    sequence_exclude: bool,
) -> List[CompletionItem]:
    """
    Action types starting with *partial*

    Args:
        registry: Action catalog
        partial: Text typed so far
        replace_range: Span the chosen type replaces
        sequence_exclude: Leave out the sequence type (inside a step)
    """
    items: List[CompletionItem] = []
    for action_type in registry.types_list():
        if sequence_exclude and action_type == appsettings.sequence_type:
            continue
        if partial and not action_type.startswith(partial):
            continue
        spec = registry.specs[action_type]
        items.append(CompletionItem(
            label=action_type,
            kind=CompletionItemKind.Value,
            detail=spec.description,
            documentation=(
                appsettings.trustWarning_make(spec.description) if spec.requires_trust else spec.description
            ),
            text_edit=TextEdit(range=replace_range, new_text=action_type),
            insert_text_format=InsertTextFormat.PlainText,
            sort_text=action_type,
        ))
    return items


def paramNameItems_build(
    registry: ActionRegistry,
    action_type: str,
    existing: List[str],
    insert_range: Range,
) -> Optional[List[CompletionItem]]:
    """Parameters of *action_type* not yet present, required ones sorted first"""
    spec = registry.spec_get(action_type)
    if spec is None:
        return None

    items: List[CompletionItem] = []
    for param in spec.parameters:
        if param.name in existing:
            continue
        items.append(CompletionItem(
            label=param.name,
            kind=CompletionItemKind.Property,
            detail=f"{param.type.value}{' (required)' if param.required else ''}",
            documentation=param.description,
            text_edit=TextEdit(range=insert_range, new_text=f"{param.name}: "),
            insert_text_format=InsertTextFormat.PlainText,
            sort_text=f"{'0' if param.required else '1'}_{param.name}",
        ))
    return items or None


def paramValueItems_build(
    registry: ActionRegistry,
    action_type: str,
    param_name: str,
    replace_range: Range,
) -> Optional[List[CompletionItem]]:
    """
    Values for one parameter: its enum, or true/false for booleans

    File-path and free-form values get no static suggestions.
    """
    spec = registry.spec_get(action_type)
    param = spec.parameter_get(param_name) if spec else None
    if param is None:
        return None

    if param.enum:
        return [
            CompletionItem(
                label=value,
                kind=CompletionItemKind.EnumMember,
                text_edit=TextEdit(range=replace_range, new_text=value),
                insert_text_format=InsertTextFormat.PlainText,
            )
            for value in param.enum
        ]

    if param.type == ParameterType.BOOLEAN:
        return [
            CompletionItem(
                label=value,
                kind=CompletionItemKind.Value,
                text_edit=TextEdit(range=replace_range, new_text=value),
                insert_text_format=InsertTextFormat.PlainText,
            )
            for value in ('true', 'false')
        ]

    return None


def renderTypeItems_build(partial: str, replace_range: Range) -> List[CompletionItem]:
    return [
        CompletionItem(
            label=name,
            kind=CompletionItemKind.Value,
            detail=description,
            text_edit=TextEdit(range=replace_range, new_text=name),
            insert_text_format=InsertTextFormat.PlainText,
        )
        for name, description in RENDER_TYPE_DESCRIPTIONS.items()
        if name.startswith(partial)
    ]
