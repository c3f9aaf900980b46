"""
Deck document model

Scans the raw text of a markdown deck into a position-accurate model:
frontmatter, slides, fenced action blocks (with nested sequence steps),
inline action links and inline render directives.

The scan works in phases over the line list:
1. Frontmatter: a leading `---` line closed by a later `---` line
2. Slide boundaries: `---` lines outside frontmatter and outside fenced code
3. Slides: line spans between boundaries, titled by their first heading
4. Action blocks: ```action fences inside each slide, YAML-parsed
5. Inline syntax: [label](action:...) and [label](render:...) per line

Parsing never raises. Malformed content becomes data: a YamlParseError on
the block, an `unclosed` flag, a missing action type.

The model is rebuilt from the full text on every edit; nothing is reused
from a previous version.

Example:
    >>> doc = DeckDocument.create("file:///talk.deck.md", 1,
    ...     "# Intro\\n---\\n```action\\ntype: file.open\\npath: a.py\\n```")
    >>> len(doc.slides)
    2
    >>> doc.slides[1].action_blocks[0].action_type
    'file.open'
"""

import re
from typing import Any, Dict, List, Optional, Pattern
from urllib.parse import unquote

from lsprotocol.types import Position, Range

from ..models.document import (
    ActionBlock,
    ActionLink,
    InlineParam,
    ParameterRange,
    RenderDirective,
    Slide,
    StepRange,
    contains_position,
    range_make,
)
from .yamlfragment import parameterRanges_extract, valueStart_find, yaml_parse


SLIDE_DELIMITER = re.compile(r'^---+\s*$')
CODE_FENCE = re.compile(r'^```')
ACTION_FENCE_OPEN = re.compile(r'^```action\s*$')
FENCE_CLOSE = re.compile(r'^```\s*$')
HEADING = re.compile(r'^#+\s+(.+)')
TYPE_LINE = re.compile(r'^type:\s*(.+)')
STEP_START = re.compile(r'^(\s*)-\s+type:\s*(.*)')
STEP_TYPE = re.compile(r'(?:^-\s+|\s+)type:\s*(.*)')
STEP_PARAMETER = re.compile(r'^\s{2,}(\w+):\s*(.*)')
ACTION_LINK = re.compile(r'\[([^\]]+)\]\(action:([a-z.]+)(?:\?([^)]*))?\)')
RENDER_DIRECTIVE = re.compile(r'\[([^\]]*)\]\(render:(file|command|diff)(?:\?([^)]*))?\)')


class DeckDocument:
    """
    Immutable parsed model of one open deck

    Attributes:
        uri: Document URI
        version: Editor version number of the text this model was built from
        content: Full raw text
        slides: Slides in document order, indices contiguous from 0
        frontmatter_range: Range of the leading frontmatter, if present
    """

    def __init__(
        self,
        uri: str,
        version: int,
        content: str,
        slides: List[Slide],
        frontmatter_range: Optional[Range],
    ) -> None:
        self.uri = uri
        self.version = version
        self.content = content
        self.slides = slides
        self.frontmatter_range = frontmatter_range

    @classmethod
    def create(cls, uri: str, version: int, content: str, sequence_type: Optional[str] = None) -> "DeckDocument":
        """
        Build a document model from raw content

        Args:
            uri: Document URI
            version: Editor version number
            content: Full document text
            sequence_type: Action type whose `steps` list is scanned for
                           nested steps (defaults to the configured one)

        Returns:
            New DeckDocument; the whole graph is created by this one call
        """
        if sequence_type is None:
            from ..config import appsettings
            sequence_type = appsettings.sequence_type

        lines = content.split('\n')
        frontmatter_range = cls.frontmatter_detect(lines)
        boundaries = cls.slideBoundaries_find(lines, frontmatter_range)
        slides = cls.slides_build(lines, boundaries, frontmatter_range, sequence_type)
        return cls(uri, version, content, slides, frontmatter_range)

    @classmethod
    def change_apply(cls, prev: "DeckDocument", version: int, content: str) -> "DeckDocument":
        """Re-derive the model for new content; nothing from *prev* but its URI is reused"""
        return cls.create(prev.uri, version, content)

    def lines_get(self) -> List[str]:
        """Document split into lines"""
        return self.content.split('\n')

    def line_get(self, line: int) -> str:
        """Text of one line, or an empty string if out of range"""
        lines = self.lines_get()
        return lines[line] if 0 <= line < len(lines) else ''

    @property
    def line_count(self) -> int:
        """Total number of lines"""
        return len(self.lines_get())

    def slide_findAt(self, position: Position) -> Optional[Slide]:
        """Slide whose range contains *position*"""
        for slide in self.slides:
            if contains_position(slide.range, position):
                return slide
        return None

    def actionBlock_findAt(self, position: Position) -> Optional[ActionBlock]:
        """Action block whose content range contains *position*"""
        for slide in self.slides:
            for block in slide.action_blocks:
                if contains_position(block.content_range, position):
                    return block
        return None

    @staticmethod
    def frontmatter_detect(lines: List[str]) -> Optional[Range]:
        """
        Detect frontmatter at the beginning of the document

        Frontmatter opens with a delimiter on line 0 and closes at the next
        delimiter line. Without a closing delimiter there is no frontmatter.

        Returns:
            Inclusive range from line 0 to the end of the closing delimiter
        """
        if len(lines) < 2 or not SLIDE_DELIMITER.match(lines[0]):
            return None
        for i in range(1, len(lines)):
            if SLIDE_DELIMITER.match(lines[i]):
                return range_make(0, 0, i, len(lines[i]))
        return None

    @staticmethod
    def slideBoundaries_find(lines: List[str], frontmatter_range: Optional[Range]) -> List[int]:
        """
        Find the delimiter lines that separate slides

        Any line starting with three backticks toggles a fenced-code flag, so
        a delimiter-looking line inside a code block is not a boundary.

        Returns:
            Line numbers of slide delimiters, ascending
        """
        boundaries: List[int] = []
        inside_fence = False
        start_line = frontmatter_range.end.line + 1 if frontmatter_range else 0

        for i in range(start_line, len(lines)):
            line = lines[i]
            if CODE_FENCE.match(line):
                inside_fence = not inside_fence
                continue
            if not inside_fence and SLIDE_DELIMITER.match(line):
                boundaries.append(i)

        return boundaries

    @classmethod
    def slides_build(
        cls,
        lines: List[str],
        boundaries: List[int],
        frontmatter_range: Optional[Range],
        sequence_type: str,
    ) -> List[Slide]:
        """
        Build slides between consecutive boundaries

        N boundaries always produce N+1 slides. A slide with no lines (two
        adjacent delimiters, or a delimiter on the last line) gets a
        zero-width range and no content.
        """
        slides: List[Slide] = []
        content_start = frontmatter_range.end.line + 1 if frontmatter_range else 0
        starts = [content_start] + [b + 1 for b in boundaries]
        last_line = len(lines) - 1

        for i, start in enumerate(starts):
            end = boundaries[i] - 1 if i < len(boundaries) else last_line

            if start > end:
                anchor_line = min(start, last_line)
                anchor_char = 0 if start <= last_line else len(lines[last_line])
                slides.append(Slide(
                    index=len(slides),
                    range=range_make(anchor_line, anchor_char, anchor_line, anchor_char),
                ))
                continue

            slide_lines = lines[start:end + 1]
            slides.append(Slide(
                index=len(slides),
                range=range_make(start, 0, end, len(lines[end])),
                title=cls.slideTitle_extract(slide_lines),
                action_blocks=cls.actionBlocks_parse(lines, start, end, sequence_type),
                action_links=cls.actionLinks_parse(slide_lines, start),
                render_directives=cls.renderDirectives_parse(slide_lines, start),
            ))

        return slides

    @staticmethod
    def slideTitle_extract(slide_lines: List[str]) -> Optional[str]:
        """Text of the first markdown heading, or None"""
        for line in slide_lines:
            match = HEADING.match(line)
            if match:
                return match.group(1).strip()
        return None

    @classmethod
    def actionBlocks_parse(
        cls, lines: List[str], start_line: int, end_line: int, sequence_type: str
    ) -> List[ActionBlock]:
        """
        Find ```action fence pairs within a slide's line span

        A block still open when the slide ends is closed synthetically at the
        slide's last line and flagged `unclosed`.
        """
        blocks: List[ActionBlock] = []
        inside_block = False
        block_start = -1
        content_lines: List[str] = []

        for i in range(start_line, end_line + 1):
            line = lines[i]
            if not inside_block:
                if ACTION_FENCE_OPEN.match(line):
                    inside_block = True
                    block_start = i
                    content_lines = []
            elif FENCE_CLOSE.match(line):
                blocks.append(cls.actionBlock_build(
                    block_start, i, content_lines, False, sequence_type
                ))
                inside_block = False
                content_lines = []
            else:
                content_lines.append(line)

        if inside_block:
            blocks.append(cls.actionBlock_build(
                block_start, end_line, content_lines, True, sequence_type
            ))

        return blocks

    @classmethod
    def actionBlock_build(
        cls,
        start_line: int,
        end_line: int,
        content_lines: List[str],
        unclosed: bool,
        sequence_type: str,
    ) -> ActionBlock:
        """
        Build one ActionBlock from its fence lines and raw content

        Args:
            start_line: Line of the opening fence
            end_line: Line of the closing fence (slide's last line if unclosed)
            content_lines: Raw lines between the fences
            unclosed: No closing fence was found
            sequence_type: Action type that carries nested steps
        """
        yaml_content = '\n'.join(content_lines)
        content_start = start_line + 1
        result = yaml_parse(yaml_content, content_start)
        parsed = result.value

        action_type: Optional[str] = None
        type_range: Optional[Range] = None
        if parsed is not None and isinstance(parsed.get('type'), str):
            action_type = parsed['type']
            for i, line in enumerate(content_lines):
                match = TYPE_LINE.match(line)
                if match:
                    value_start = match.start(1)
                    type_range = range_make(
                        content_start + i, value_start,
                        content_start + i, value_start + len(match.group(1).rstrip()),
                    )
                    break

        parameters: List[ParameterRange] = []
        if parsed is not None:
            parameters = parameterRanges_extract(yaml_content, parsed, content_start)

        steps: List[StepRange] = []
        if parsed is not None and action_type == sequence_type and isinstance(parsed.get('steps'), list):
            steps = cls.steps_parse(content_lines, content_start, parsed['steps'])

        if content_lines:
            content_end = content_start + len(content_lines) - 1
            last_content = content_lines[-1]
        else:
            content_end = content_start
            last_content = ''

        return ActionBlock(
            range=range_make(start_line, 0, end_line, 0 if unclosed else 3),
            content_range=range_make(content_start, 0, content_end, len(last_content)),
            yaml_content=yaml_content,
            parsed_yaml=parsed,
            parse_error=result.error,
            action_type=action_type,
            type_range=type_range,
            parameters=parameters,
            steps=steps,
            unclosed=unclosed,
        )

    @classmethod
    def steps_parse(
        cls, content_lines: List[str], content_start: int, steps_value: List[Any]
    ) -> List[StepRange]:
        """
        Delimit sequence steps by their `- type:` lines

        Each step runs from its `- type:` line to the line before the next
        one (or the end of the block). Step markers beyond the length of the
        parsed steps list are ignored.
        """
        markers = [i for i, line in enumerate(content_lines) if STEP_START.match(line)]
        steps: List[StepRange] = []

        for index, local_start in enumerate(markers):
            if index >= len(steps_value):
                break
            local_end = markers[index + 1] - 1 if index + 1 < len(markers) else len(content_lines) - 1
            step_value = steps_value[index]
            steps.append(cls.stepRange_build(
                index,
                content_lines,
                content_start,
                local_start,
                local_end,
                step_value if isinstance(step_value, dict) else None,
            ))

        return steps

    @staticmethod
    def stepRange_build(
        index: int,
        content_lines: List[str],
        content_start: int,
        local_start: int,
        local_end: int,
        step_value: Optional[Dict[Any, Any]],
    ) -> StepRange:
        """Compute type and parameter ranges of one step from its raw lines"""
        action_type: Optional[str] = None
        type_range: Optional[Range] = None
        parameters: List[ParameterRange] = []

        if step_value is not None:
            if isinstance(step_value.get('type'), str):
                action_type = step_value['type']

            for i in range(local_start, local_end + 1):
                line = content_lines[i]
                doc_line = content_start + i

                type_match = STEP_TYPE.search(line)
                if type_match and type_range is None:
                    value_start = type_match.start(1)
                    type_range = range_make(
                        doc_line, value_start,
                        doc_line, value_start + len(type_match.group(1).rstrip()),
                    )

                param_match = STEP_PARAMETER.match(line)
                if not param_match or param_match.group(1) == 'type':
                    continue
                key = param_match.group(1)
                if key not in step_value:
                    continue
                key_start = param_match.start(1)
                colon_pos = line.index(':', param_match.end(1))
                value_start = valueStart_find(line, colon_pos)
                parameters.append(ParameterRange(
                    key=key,
                    value=step_value[key],
                    key_range=range_make(doc_line, key_start, doc_line, param_match.end(1)),
                    value_range=range_make(
                        doc_line, value_start,
                        doc_line, value_start + len(param_match.group(2).rstrip()),
                    ),
                    line_range=range_make(doc_line, 0, doc_line, len(line)),
                ))

        return StepRange(
            index=index,
            range=range_make(
                content_start + local_start, 0,
                content_start + local_end, len(content_lines[local_end]),
            ),
            action_type=action_type,
            type_range=type_range,
            parameters=parameters,
        )

    @staticmethod
    def queryParams_decode(query: str, query_start: int, doc_line: int) -> Dict[str, InlineParam]:
        """
        Split an inline query string into decoded values with raw-text ranges

        Args:
            query: Text after `?` up to the closing parenthesis
            query_start: Character offset of the query within its line
            doc_line: Document line the query sits on

        Returns:
            Parameters keyed by name; later duplicates win, pairs without
            a key are skipped
        """
        params: Dict[str, InlineParam] = {}
        offset = query_start
        for pair in query.split('&'):
            eq = pair.find('=')
            if eq > 0:
                raw_value = pair[eq + 1:]
                value_offset = offset + eq + 1
                params[pair[:eq]] = InlineParam(
                    value=unquote(raw_value),
                    range=range_make(doc_line, value_offset, doc_line, value_offset + len(raw_value)),
                )
            offset += len(pair) + 1
        return params

    @classmethod
    def inlineMatches_scan(cls, pattern: Pattern[str], slide_lines: List[str], slide_start: int) -> List[Dict[str, Any]]:
        """Run an inline directive pattern over each slide line, collecting match geometry"""
        found: List[Dict[str, Any]] = []
        for offset, line in enumerate(slide_lines):
            doc_line = slide_start + offset
            for match in pattern.finditer(line):
                query = match.group(3) or ''
                found.append({
                    'range': range_make(doc_line, match.start(), doc_line, match.end()),
                    'label': match.group(1),
                    'type': match.group(2),
                    'type_range': range_make(doc_line, match.start(2), doc_line, match.end(2)),
                    'params': cls.queryParams_decode(query, match.start(3), doc_line) if query else {},
                })
        return found

    @classmethod
    def actionLinks_parse(cls, slide_lines: List[str], slide_start: int) -> List[ActionLink]:
        """Inline `[label](action:type?...)` links of a slide"""
        return [ActionLink(**found) for found in cls.inlineMatches_scan(ACTION_LINK, slide_lines, slide_start)]

    @classmethod
    def renderDirectives_parse(cls, slide_lines: List[str], slide_start: int) -> List[RenderDirective]:
        """Inline `[label](render:type?...)` directives of a slide"""
        return [
            RenderDirective(**found)
            for found in cls.inlineMatches_scan(RENDER_DIRECTIVE, slide_lines, slide_start)
        ]
