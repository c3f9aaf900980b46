"""
Document model tests

Tests frontmatter detection, slide splitting, action block extraction,
sequence steps, inline links and render directives.
"""

import pytest
from lsprotocol.types import Position

from deckls.lib.document import DeckDocument
from deckls.models.document import contains_position, range_make


URI = "file:///talk.deck.md"


def deck(text: str) -> DeckDocument:
    return DeckDocument.create(URI, 1, text)


def span(range):
    """(start line, start char, end line, end char) of a Range"""
    return (range.start.line, range.start.character, range.end.line, range.end.character)


SEQUENCE_DECK = "\n".join([
    "```action",              # 0
    "type: sequence",         # 1
    "steps:",                 # 2
    "  - type: file.open",    # 3
    "    path: a.py",         # 4
    "  - type: terminal.run", # 5
    "    command: ls",        # 6
    "```",                    # 7
])


class TestContainsPosition:
    """Test range containment"""

    def test_end_is_inclusive(self):
        """A position equal to the range end is contained"""
        r = range_make(1, 2, 3, 4)
        assert contains_position(r, Position(line=3, character=4))

    def test_start_is_inclusive(self):
        r = range_make(1, 2, 3, 4)
        assert contains_position(r, Position(line=1, character=2))

    @pytest.mark.parametrize("line,character", [(0, 9), (1, 1), (3, 5), (4, 0)])
    def test_outside(self, line, character):
        r = range_make(1, 2, 3, 4)
        assert not contains_position(r, Position(line=line, character=character))


class TestSlides:
    """Test slide boundaries and titles"""

    def test_single_slide(self):
        doc = deck("# Hello\nSome text")

        assert len(doc.slides) == 1
        assert doc.slides[0].title == "Hello"
        assert span(doc.slides[0].range) == (0, 0, 1, 9)

    @pytest.mark.parametrize("text,expected", [
        ("# A\n---\n# B\n---\n# C", 3),
        ("# A\n----\n# B", 2),
        ("# A\n---   \n# B", 2),
        ("# A\n---\n---\n# D", 3),
        ("# A\n---", 2),
        ("---\n# A", 2),
    ])
    def test_n_delimiters_give_n_plus_one_slides(self, text, expected):
        """Every delimiter starts a new slide, even when the slide is empty"""
        doc = deck(text)

        assert len(doc.slides) == expected
        assert [s.index for s in doc.slides] == list(range(expected))

    def test_titles(self):
        doc = deck("# A\n---\nno heading\n---\n## C  ")

        assert [s.title for s in doc.slides] == ["A", None, "C"]

    def test_empty_slide_between_adjacent_delimiters(self):
        """An empty slide gets a zero-width range and no content"""
        doc = deck("# A\n---\n---\n# C")
        empty = doc.slides[1]

        assert span(empty.range) == (2, 0, 2, 0)
        assert empty.title is None
        assert empty.action_blocks == []

    def test_delimiter_on_last_line(self):
        """Trailing delimiter yields an empty slide at end of file"""
        doc = deck("# A\n---")

        assert span(doc.slides[1].range) == (1, 3, 1, 3)

    def test_delimiter_inside_fenced_code(self):
        """A delimiter inside a fenced block is not a slide boundary"""
        doc = deck("# A\n```yaml\n---\nkey: v\n```\n# still A")

        assert len(doc.slides) == 1

    def test_slide_find(self):
        doc = deck("# A\ntext\n---\n# B")

        assert doc.slide_findAt(Position(line=1, character=2)).index == 0
        assert doc.slide_findAt(Position(line=3, character=0)).index == 1
        assert doc.slide_findAt(Position(line=2, character=1)) is None


class TestFrontmatter:
    """Test frontmatter detection"""

    def test_frontmatter_detected(self):
        doc = deck("---\ntitle: Talk\n---\n# A\n---\n# B")

        assert span(doc.frontmatter_range) == (0, 0, 2, 3)
        assert len(doc.slides) == 2
        assert doc.slides[0].range.start.line == 3

    def test_unclosed_frontmatter_is_not_frontmatter(self):
        doc = deck("---\n# A")

        assert doc.frontmatter_range is None

    def test_no_frontmatter(self):
        assert deck("# A").frontmatter_range is None


class TestActionBlocks:
    """Test fenced action block extraction"""

    def test_closed_block(self):
        doc = deck("# Demo\n```action\ntype: file.open\npath: src/a.py\nline: 10\n```")
        block = doc.slides[0].action_blocks[0]

        assert span(block.range) == (1, 0, 5, 3)
        assert span(block.content_range) == (2, 0, 4, 8)
        assert block.unclosed is False
        assert block.action_type == "file.open"
        assert span(block.type_range) == (2, 6, 2, 15)
        assert [p.key for p in block.parameters] == ["type", "path", "line"]
        assert block.parsed_yaml["line"] == 10
        assert block.parse_error is None

    def test_content_starts_after_opening_fence(self):
        doc = deck("text\n\n```action\ntype: file.open\n```")
        block = doc.slides[0].action_blocks[0]

        assert block.content_range.start.line == block.range.start.line + 1

    def test_unclosed_block(self):
        """Missing closing fence ends the block at the slide's last line"""
        doc = deck("# A\n```action\ntype: file.open\npath: a.py")
        block = doc.slides[0].action_blocks[0]

        assert block.unclosed is True
        assert span(block.range) == (1, 0, 3, 0)
        assert block.content_range.end.line == doc.slides[0].range.end.line

    def test_other_fences_ignored(self):
        doc = deck("```python\nx = 1\n```")

        assert doc.slides[0].action_blocks == []

    def test_parse_error_kept_as_data(self):
        doc = deck("```action\ntype: [broken\n```")
        block = doc.slides[0].action_blocks[0]

        assert block.parse_error is not None
        assert block.parsed_yaml is None
        assert block.action_type is None

    def test_non_string_type_ignored(self):
        block = deck("```action\ntype: 42\n```").slides[0].action_blocks[0]

        assert block.action_type is None
        assert block.type_range is None

    def test_block_find(self):
        doc = deck("# A\n```action\ntype: file.open\n```")

        assert doc.actionBlock_findAt(Position(line=2, character=3)) is not None
        assert doc.actionBlock_findAt(Position(line=0, character=0)) is None


class TestSequenceSteps:
    """Test nested sequence step extraction"""

    def test_steps_located(self):
        block = deck(SEQUENCE_DECK).slides[0].action_blocks[0]

        assert len(block.steps) == 2
        first, second = block.steps
        assert first.action_type == "file.open"
        assert span(first.range) == (3, 0, 4, 14)
        assert span(first.type_range) == (3, 10, 3, 19)
        assert [p.key for p in first.parameters] == ["path"]
        assert span(first.parameters[0].value_range) == (4, 10, 4, 14)
        assert second.action_type == "terminal.run"
        assert span(second.range) == (5, 0, 6, 15)
        assert second.parameters[0].value == "ls"

    def test_steps_only_for_sequence(self):
        text = "```action\ntype: file.open\nsteps:\n  - type: file.open\n```"
        block = deck(text).slides[0].action_blocks[0]

        assert block.steps == []

    def test_step_without_type(self):
        text = "```action\ntype: sequence\nsteps:\n  - type:\n    path: a.py\n```"
        step = deck(text).slides[0].action_blocks[0].steps[0]

        assert step.action_type is None
        assert [p.key for p in step.parameters] == ["path"]


class TestInlineLinks:
    """Test inline action links"""

    def test_link_with_query(self):
        doc = deck("Click [Open it](action:file.open?path=src%2Fa.py&line=3) now")
        link = doc.slides[0].action_links[0]

        assert link.label == "Open it"
        assert link.type == "file.open"
        assert span(link.type_range) == (0, 23, 0, 32)
        assert link.params["path"].value == "src/a.py"
        assert span(link.params["path"].range) == (0, 38, 0, 48)
        assert link.params["line"].value == "3"
        assert span(link.params["line"].range) == (0, 54, 0, 55)

    def test_label_containing_action_prefix(self):
        """Type range comes from the match itself, not a text search"""
        link = deck("[see action:x](action:file.open)").slides[0].action_links[0]

        assert link.type == "file.open"
        assert link.type_range.start.character == 22
        assert link.params == {}

    def test_pair_without_key_dropped(self):
        link = deck("[x](action:file.open?=v&path=a)").slides[0].action_links[0]

        assert list(link.params) == ["path"]

    def test_multiple_links_per_line(self):
        doc = deck("[a](action:file.open) and [b](action:terminal.run?command=ls)")

        assert [l.type for l in doc.slides[0].action_links] == ["file.open", "terminal.run"]

    def test_render_directive(self):
        doc = deck("# A\n[](render:file?path=a.py&lines=1-5)")
        directive = doc.slides[0].render_directives[0]

        assert directive.label == ""
        assert directive.type == "file"
        assert span(directive.type_range) == (1, 10, 1, 14)
        assert directive.params["lines"].value == "1-5"

    def test_unknown_render_type_not_matched(self):
        doc = deck("[x](render:video?src=a)")

        assert doc.slides[0].render_directives == []


class TestDocumentLifecycle:
    """Test re-parsing and line queries"""

    def test_reparse_is_pure(self):
        """Parsing identical content twice yields identical models"""
        text = "---\nt: 1\n---\n# A\n" + SEQUENCE_DECK + "\n---\n[x](action:file.open?path=a)"

        assert deck(text).slides == deck(text).slides

    def test_change_apply(self):
        first = deck("# A")
        second = DeckDocument.change_apply(first, 2, "# A\n---\n# B")

        assert second.uri == URI
        assert second.version == 2
        assert len(second.slides) == 2
        assert len(first.slides) == 1

    def test_line_queries(self):
        doc = deck("one\ntwo")

        assert doc.line_get(1) == "two"
        assert doc.line_get(5) == ""
        assert doc.line_get(-1) == ""
        assert doc.line_count == 2
        assert doc.lines_get() == ["one", "two"]
