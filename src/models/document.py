"""
Document model data structures

Position-accurate records produced by DeckDocument.create(). Every range
points into the literal source text of the deck, never into a re-serialized
structure, so diagnostics and edits can address exact characters.

All positions are zero-based (line, character) pairs using lsprotocol's
Position/Range types.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from lsprotocol.types import Position, Range


def range_make(start_line: int, start_char: int, end_line: int, end_char: int) -> Range:
    """Shorthand for building an lsprotocol Range from four integers"""
    return Range(
        start=Position(line=start_line, character=start_char),
        end=Position(line=end_line, character=end_char),
    )


def contains_position(range: Range, position: Position) -> bool:
    """
    Check if a position lies within a range

    Both ends are inclusive: a position equal to range.end is contained.

    Args:
        range: Range to test against
        position: Cursor or diagnostic position

    Returns:
        True if range.start <= position <= range.end
    """
    if position.line < range.start.line or position.line > range.end.line:
        return False
    if position.line == range.start.line and position.character < range.start.character:
        return False
    if position.line == range.end.line and position.character > range.end.character:
        return False
    return True


@dataclass
class YamlParseError:
    """
    Parse failure of an action block fragment, mapped into the document

    Attributes:
        message: First line of the parser's complaint, location suffix removed
        range: Document range of the offending fragment line
        mark: Raw (line, column) reported by the parser relative to the
              fragment, or None for synthetic errors
    """
    message: str
    range: Range
    mark: Optional[Dict[str, int]] = None


@dataclass
class YamlParseResult:
    """Outcome of parsing a fragment: exactly one of value/error, or neither for empty input"""
    value: Optional[Dict[Any, Any]] = None
    error: Optional[YamlParseError] = None


@dataclass
class ParameterRange:
    """
    One `key: value` line of an action block or step

    Attributes:
        key: Parameter name
        value: Parsed value from the fragment's mapping
        key_range: Span of the key text
        value_range: Span of the value text (after colon and whitespace)
        line_range: Whole source line
    """
    key: str
    value: Any
    key_range: Range
    value_range: Range
    line_range: Range


@dataclass
class StepRange:
    """
    One entry of a sequence action's `steps` list

    Attributes:
        index: Position in the steps list (0-based)
        range: From the `- type:` line to the line before the next step
        action_type: Declared step type, if a string
        type_range: Span of the type value text
        parameters: Step parameters (excluding `type`)
    """
    index: int
    range: Range
    action_type: Optional[str] = None
    type_range: Optional[Range] = None
    parameters: List[ParameterRange] = field(default_factory=list)


@dataclass
class ActionBlock:
    """
    A fenced ```action block inside a slide

    Attributes:
        range: Opening fence through closing fence (or synthetic close)
        content_range: Lines between the fences
        yaml_content: Raw fragment text
        parsed_yaml: Parsed mapping, or None on error/empty
        parse_error: Parse failure, if any
        action_type: Declared `type` value, if a string
        type_range: Span of the literal type value on its source line
        parameters: Top-level parameters
        steps: Nested steps (sequence type only)
        unclosed: No closing fence was found before the slide ended
    """
    range: Range
    content_range: Range
    yaml_content: str
    parsed_yaml: Optional[Dict[Any, Any]] = None
    parse_error: Optional[YamlParseError] = None
    action_type: Optional[str] = None
    type_range: Optional[Range] = None
    parameters: List[ParameterRange] = field(default_factory=list)
    steps: List[StepRange] = field(default_factory=list)
    unclosed: bool = False


@dataclass
class InlineParam:
    """Decoded query-string value and the range of its raw text"""
    value: str
    range: Range


@dataclass
class ActionLink:
    """
    Inline `[label](action:type?k=v&...)` link

    Attributes:
        range: Whole matched link
        label: Bracketed label text
        type: Action type identifier
        type_range: Span of the type identifier
        params: Query parameters keyed by name
    """
    range: Range
    label: str
    type: str
    type_range: Range
    params: Dict[str, InlineParam] = field(default_factory=dict)


@dataclass
class RenderDirective:
    """
    Inline `[label](render:file|command|diff?k=v&...)` directive

    Same shape as ActionLink; `type` is always one of the render types.
    """
    range: Range
    label: str
    type: str
    type_range: Range
    params: Dict[str, InlineParam] = field(default_factory=dict)


@dataclass
class Slide:
    """
    A slide: the lines between two delimiters (or document start/end)

    Attributes:
        index: Contiguous 0-based slide number
        range: Slide extent; zero-width for an empty slide
        title: Text of the first markdown heading, if any
        action_blocks: Fenced action blocks in this slide
        action_links: Inline action links in this slide
        render_directives: Inline render directives in this slide
    """
    index: int
    range: Range
    title: Optional[str] = None
    action_blocks: List[ActionBlock] = field(default_factory=list)
    action_links: List[ActionLink] = field(default_factory=list)
    render_directives: List[RenderDirective] = field(default_factory=list)
