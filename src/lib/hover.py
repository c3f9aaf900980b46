"""
Hover documentation for action types, parameters, inline links and render
directives. All content is markdown built from the action catalog.
"""

from typing import Dict, Optional

from lsprotocol.types import Hover, MarkupContent, MarkupKind, Position, Range

from ..models.actions import RENDER_TYPE_DESCRIPTIONS
from ..models.document import InlineParam, contains_position
from .actions import ActionRegistry
from .document import DeckDocument


def markdown_hover(value: str, range: Range) -> Hover:
    return Hover(contents=MarkupContent(kind=MarkupKind.Markdown, value=value), range=range)


def paramSummary_make(params: Dict[str, InlineParam]) -> str:
    """Bullet list of inline query parameters"""
    if not params:
        return '*No parameters*'
    return '\n'.join(f"- `{key}`: `{param.value}`" for key, param in params.items())


def hover_get(
    document: DeckDocument,
    position: Position,
    registry: Optional[ActionRegistry] = None,
) -> Optional[Hover]:
    """
    Hover at *position*

    Checked in order: inline action links, render directives, then the
    action block under the cursor (type value, parameter key, step type,
    step parameter key).

    Returns:
        Markdown Hover, or None where nothing is documented
    """
    registry = registry or ActionRegistry()
    return (
        actionLinkHover_get(document, position, registry)
        or renderDirectiveHover_get(document, position)
        or actionBlockHover_get(document, position, registry)
    )


def typeHover_make(registry: ActionRegistry, action_type: Optional[str], range: Range) -> Optional[Hover]:
    """Action description and a parameter table"""
    spec = registry.spec_get(action_type) if action_type else None
    if spec is None:
        return None

    trust_warning = '⚠️ **Requires Workspace Trust**\n\n' if spec.requires_trust else ''
    rows = []
    for param in spec.parameters:
        required = '✅' if param.required else ''
        allowed = f" ({', '.join(param.enum)})" if param.enum else ''
        rows.append(f"| `{param.name}` | `{param.type.value}` | {required} | {param.description}{allowed} |")

    markdown = '\n'.join([
        f"### `{spec.type}`",
        '',
        trust_warning + spec.description,
        '',
        '| Parameter | Type | Required | Description |',
        '|-----------|------|----------|-------------|',
        *rows,
    ])
    return markdown_hover(markdown, range)


def paramHover_make(
    registry: ActionRegistry, action_type: Optional[str], param_name: str, range: Range
) -> Optional[Hover]:
    spec = registry.spec_get(action_type) if action_type else None
    param = spec.parameter_get(param_name) if spec else None
    if param is None:
        return None

    lines = [
        f"**`{param.name}`**: `{param.type.value}`{' *(required)*' if param.required else ''}",
        '',
        param.description,
    ]
    if param.enum:
        lines.extend(['', 'Allowed values: ' + ', '.join(f"`{value}`" for value in param.enum)])
    return markdown_hover('\n'.join(lines), range)


def actionBlockHover_get(document: DeckDocument, position: Position, registry: ActionRegistry) -> Optional[Hover]:
    block = document.actionBlock_findAt(position)
    if block is None:
        return None

    if block.type_range is not None and contains_position(block.type_range, position):
        return typeHover_make(registry, block.action_type, block.type_range)

    for param in block.parameters:
        if contains_position(param.key_range, position):
            return paramHover_make(registry, block.action_type, param.key, param.key_range)

    for step in block.steps:
        if step.type_range is not None and contains_position(step.type_range, position):
            return typeHover_make(registry, step.action_type, step.type_range)
        for param in step.parameters:
            if contains_position(param.key_range, position):
                return paramHover_make(registry, step.action_type, param.key, param.key_range)

    return None


def actionLinkHover_get(document: DeckDocument, position: Position, registry: ActionRegistry) -> Optional[Hover]:
    for slide in document.slides:
        for link in slide.action_links:
            if not contains_position(link.range, position):
                continue
            if contains_position(link.type_range, position):
                return typeHover_make(registry, link.type, link.type_range)
            spec = registry.spec_get(link.type)
            if spec is not None:
                markdown = '\n'.join([
                    f"### Action: `{link.type}`",
                    '',
                    spec.description,
                    '',
                    paramSummary_make(link.params),
                ])
                return markdown_hover(markdown, link.range)
    return None


def renderDirectiveHover_get(document: DeckDocument, position: Position) -> Optional[Hover]:
    for slide in document.slides:
        for directive in slide.render_directives:
            if not contains_position(directive.range, position):
                continue
            description = RENDER_TYPE_DESCRIPTIONS.get(directive.type, 'Unknown render type')
            heading = f"### `render:{directive.type}`\n\n{description}"
            if contains_position(directive.type_range, position):
                return markdown_hover(heading, directive.type_range)
            return markdown_hover(f"{heading}\n\n{paramSummary_make(directive.params)}", directive.range)
    return None
