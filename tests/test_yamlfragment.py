"""
YAML fragment parser tests

Tests mapping validation, document-relative error ranges, message cleanup,
and recovery of key/value source spans.
"""

import pytest

from deckls.lib.yamlfragment import (
    NOT_A_MAPPING,
    TOO_DEEP,
    message_clean,
    parameterRanges_extract,
    yaml_parse,
)


class TestYamlParse:
    """Test parsing fragments into mappings"""

    def test_valid_mapping(self):
        """Well-formed mapping parses without error"""
        result = yaml_parse("type: file.open\npath: src/a.py\nline: 10", start_line=4)

        assert result.error is None
        assert result.value == {'type': 'file.open', 'path': 'src/a.py', 'line': 10}

    @pytest.mark.parametrize("text", ["", "   ", "\n\n", "~"])
    def test_empty_or_null(self, text):
        """Empty and null fragments yield neither value nor error"""
        result = yaml_parse(text, start_line=0)

        assert result.value is None
        assert result.error is None

    def test_scalar_rejected(self):
        """A bare scalar is not a mapping"""
        result = yaml_parse("hello", start_line=7)

        assert result.value is None
        assert result.error.message == NOT_A_MAPPING
        assert result.error.range.start.line == 7
        assert result.error.range.start.character == 0
        assert result.error.range.end.character == 5
        assert result.error.mark is None

    def test_sequence_rejected(self):
        """A top-level list is not a mapping"""
        result = yaml_parse("- a\n- b", start_line=2)

        assert result.error.message == NOT_A_MAPPING
        assert result.error.range.start.line == 2
        assert result.error.range.end.character == 3

    def test_syntax_error_mapped_to_document(self):
        """Parser mark is offset by the fragment's start line"""
        result = yaml_parse("key: value\n  bad: indent", start_line=10)

        assert result.value is None
        error = result.error
        assert error.message == "mapping values are not allowed here"
        assert error.mark == {'line': 1, 'column': 5}
        assert error.range.start.line == 11
        assert error.range.start.character == 5
        assert error.range.end.line == 11
        assert error.range.end.character == len("  bad: indent")

    def test_deep_nesting_reported_not_raised(self):
        """Nesting beyond the parser's recursion limit becomes an error on the first line"""
        text = "type: " + "[" * 3000
        result = yaml_parse(text, start_line=5)

        assert result.value is None
        assert result.error.message == TOO_DEEP
        assert result.error.range.start.line == 5
        assert result.error.range.end.character == len(text)

    def test_start_char_offset(self):
        """Character offset shifts both ends of the error range"""
        result = yaml_parse("key: value\n  bad: indent", start_line=0, start_char=2)

        assert result.error.range.start.character == 7
        assert result.error.range.end.character == 2 + len("  bad: indent")


class TestMessageClean:
    """Test parser message cleanup"""

    def test_location_suffix_removed(self):
        assert message_clean("bad indentation at line 3, column 5") == "bad indentation"

    def test_context_lines_removed(self):
        """Only the first line survives"""
        raw = "found unexpected end of stream\n  in \"<unicode string>\", line 2\n    ^"
        assert message_clean(raw) == "found unexpected end of stream"

    def test_plain_message_untouched(self):
        assert message_clean("mapping values are not allowed here") == "mapping values are not allowed here"


class TestParameterRanges:
    """Test key/value span recovery"""

    def test_top_level_keys_located(self):
        """Each top-level key gets key, value and line ranges"""
        text = "type: file.open\npath: src/a.py"
        params = parameterRanges_extract(text, yaml_parse(text, 3).value, 3)

        assert [p.key for p in params] == ['type', 'path']
        path = params[1]
        assert path.value == 'src/a.py'
        assert path.key_range.start.line == 4
        assert (path.key_range.start.character, path.key_range.end.character) == (0, 4)
        assert (path.value_range.start.character, path.value_range.end.character) == (6, 14)
        assert (path.line_range.start.character, path.line_range.end.character) == (0, 14)

    def test_nested_keys_skipped(self):
        """Indented keys of nested structures are not top-level parameters"""
        text = "type: sequence\nsteps:\n  - type: file.open\n    path: a.py"
        params = parameterRanges_extract(text, yaml_parse(text, 0).value, 0)

        assert [p.key for p in params] == ['type', 'steps']

    def test_unparsed_keys_skipped(self):
        """Keys missing from the parsed mapping are ignored"""
        text = "type: file.open\npath: a.py"
        params = parameterRanges_extract(text, {'type': 'file.open'}, 0)

        assert [p.key for p in params] == ['type']

    def test_empty_value(self):
        """A key with no value has a zero-width value range after the colon"""
        text = "type: file.open\npath:"
        params = parameterRanges_extract(text, yaml_parse(text, 0).value, 0)

        path = params[1]
        assert path.value is None
        assert path.value_range.start.character == 5
        assert path.value_range.end.character == 5

    def test_value_range_trims_trailing_space(self):
        text = "path: a.py   "
        params = parameterRanges_extract(text, {'path': 'a.py'}, 0)

        assert params[0].value_range.end.character == 10
        assert params[0].line_range.end.character == 13
