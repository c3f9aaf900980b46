"""
YAML fragment parsing with document-relative error ranges

Action blocks hold a YAML mapping embedded in a markdown deck. This module
parses such a fragment with PyYAML and translates any parser mark back into
the coordinates of the enclosing document, so a diagnostic can point at the
exact line the author has to fix.

It also recovers the literal source span of every top-level `key: value`
pair by re-scanning the raw fragment text, because PyYAML's constructed
values carry no positions.

Example:
    >>> result = yaml_parse("type: file.open\\npath: a.py", start_line=4)
    >>> result.value
    {'type': 'file.open', 'path': 'a.py'}
    >>> [p.key_range.start.line for p in parameterRanges_extract(
    ...     "type: file.open\\npath: a.py", result.value, 4)]
    [4, 5]
"""

import re
from typing import Any, Dict, List

import yaml
from lsprotocol.types import Range

from ..models.document import ParameterRange, YamlParseError, YamlParseResult, range_make


NOT_A_MAPPING = 'Action block content must be a YAML mapping (key: value pairs)'
TOO_DEEP = 'YAML nesting is too deep to parse'

PARAMETER_LINE = re.compile(r'^(\s*-?\s*)(\w[\w.]*)\s*:\s*(.*)')
LOCATION_SUFFIX = re.compile(r'^(.+?)(?:\s+at line \d+)')


def message_clean(message: str) -> str:
    """
    Reduce a parser message to a single display line

    Drops an "at line N, column M" suffix and anything after the first line
    (PyYAML appends the offending source and a caret on following lines).

    Args:
        message: Raw exception text

    Returns:
        Trimmed one-line message

    Example:
        >>> message_clean("bad indentation at line 3, column 5:\\n  key: v\\n  ^")
        'bad indentation'
    """
    first_line = message.split('\n')[0]
    match = LOCATION_SUFFIX.match(first_line)
    if match:
        return match.group(1).strip()
    return first_line.strip()


def firstLine_range(text: str, start_line: int, start_char: int) -> Range:
    """Range covering the first line of a fragment"""
    first = text.split('\n')[0]
    return range_make(start_line, start_char, start_line, start_char + len(first))


def yaml_parse(text: str, start_line: int, start_char: int = 0) -> YamlParseResult:
    """
    Parse an action block fragment as a YAML mapping

    Never raises: every failure is returned as a YamlParseError whose range
    is expressed in document coordinates.

    Args:
        text: Raw lines between the action fences, joined with newlines
        start_line: 0-based document line of the fragment's first line
        start_char: 0-based character offset of the fragment (usually 0)

    Returns:
        YamlParseResult with:
            - value: the parsed mapping on success
            - error: the mapped parse failure, if any
        Both are None for an empty or null fragment.
    """
    try:
        value = yaml.safe_load(text)
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark
        if mark is None:
            return YamlParseResult(error=YamlParseError(
                message=message_clean(e.problem or e.context or str(e)),
                range=firstLine_range(text, start_line, start_char),
            ))
        lines = text.split('\n')
        line_length = len(lines[mark.line]) if mark.line < len(lines) else 0
        error_char = start_char + mark.column
        return YamlParseResult(error=YamlParseError(
            message=message_clean(e.problem or e.context or str(e)),
            range=range_make(
                start_line + mark.line, error_char,
                start_line + mark.line, max(error_char, start_char + line_length),
            ),
            mark={'line': mark.line, 'column': mark.column},
        ))
    except (yaml.YAMLError, ValueError) as e:
        # Constructor failures without a mark, e.g. an impossible date
        return YamlParseResult(error=YamlParseError(
            message=message_clean(str(e)) or 'Unknown YAML parse error',
            range=firstLine_range(text, start_line, start_char),
        ))
    except RecursionError:
        # PyYAML recurses once per nesting level of flow collections
        return YamlParseResult(error=YamlParseError(
            message=TOO_DEEP,
            range=firstLine_range(text, start_line, start_char),
        ))

    if value is None:
        return YamlParseResult()
    if not isinstance(value, dict):
        return YamlParseResult(error=YamlParseError(
            message=NOT_A_MAPPING,
            range=firstLine_range(text, start_line, start_char),
        ))
    return YamlParseResult(value=value)


def valueStart_find(line: str, colon_pos: int) -> int:
    """Character where a value begins: after the colon and any whitespace"""
    after = line[colon_pos + 1:]
    return colon_pos + 1 + (len(after) - len(after.lstrip()))


def parameterRanges_extract(
    text: str, parsed: Dict[Any, Any], start_line: int
) -> List[ParameterRange]:
    """
    Locate the source span of each top-level key of a parsed fragment

    Re-scans the raw text line by line with a `key: value` pattern. Only
    lines with no indentation (or a list-item prefix) are considered, and
    only keys that PyYAML actually produced, which keeps keys of unrelated
    nested structures out of the result.

    Args:
        text: Raw fragment text
        parsed: Mapping returned by yaml_parse() for the same text
        start_line: 0-based document line of the fragment's first line

    Returns:
        One ParameterRange per matching line, in source order
    """
    results: List[ParameterRange] = []

    for i, line in enumerate(text.split('\n')):
        match = PARAMETER_LINE.match(line)
        if not match:
            continue

        indent = match.group(1)
        if indent and not indent.startswith('-'):
            continue

        key = match.group(2)
        if key not in parsed:
            continue

        doc_line = start_line + i
        key_start = match.start(2)
        key_end = match.end(2)
        colon_pos = line.index(':', key_end)
        value_start = valueStart_find(line, colon_pos)

        results.append(ParameterRange(
            key=key,
            value=parsed[key],
            key_range=range_make(doc_line, key_start, doc_line, key_end),
            value_range=range_make(
                doc_line, value_start,
                doc_line, max(value_start, len(line.rstrip())),
            ),
            line_range=range_make(doc_line, 0, doc_line, len(line)),
        ))

    return results
