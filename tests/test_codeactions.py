"""
Quick-fix engine tests

Tests typo corrections, missing parameter insertion and unknown parameter
removal, each driven by diagnostics from the diagnostic engine.
"""

import pytest
from lsprotocol.types import CodeActionKind, Diagnostic

from deckls.lib.codeactions import codeActions_get, levenshtein
from deckls.lib.diagnostics import diagnostics_compute
from deckls.lib.document import DeckDocument
from deckls.models.document import range_make


URI = "file:///talk.deck.md"


def fixes(text: str):
    document = DeckDocument.create(URI, 1, text)
    diagnostics = diagnostics_compute(document)
    return codeActions_get(document, range_make(0, 0, 0, 0), diagnostics)


def only_edit(action):
    edits = action.edit.changes[URI]
    assert len(edits) == 1
    return edits[0]


def span(range):
    return (range.start.line, range.start.character, range.end.line, range.end.character)


SEQUENCE_DECK = "\n".join([
    "```action",
    "type: sequence",
    "steps:",
    "  - type: file.open",
    "    line: 3",
    "  - type: terminal.run",
    "    command: ls",
    "    colour: red",
    "```",
])


class TestLevenshtein:
    """Test the edit distance used for typo suggestions"""

    @pytest.mark.parametrize("a,b,expected", [
        ("", "", 0),
        ("abc", "", 3),
        ("", "abc", 3),
        ("file.opn", "file.open", 1),
        ("kitten", "sitting", 3),
        ("flaw", "lawn", 2),
    ])
    def test_distances(self, a, b, expected):
        assert levenshtein(a, b) == expected

    def test_symmetric(self):
        assert levenshtein("termnal.run", "terminal.run") == levenshtein("terminal.run", "termnal.run")


class TestTypoCorrections:
    """Test near-miss replacement of unknown types"""

    def test_single_suggestion_is_preferred(self):
        actions = fixes("```action\ntype: file.opn\npath: a.py\n```")

        assert [a.title for a in actions] == ["Change to 'file.open'"]
        assert actions[0].is_preferred is True
        assert actions[0].kind == CodeActionKind.QuickFix
        edit = only_edit(actions[0])
        assert edit.new_text == 'file.open'
        assert span(edit.range) == (1, 6, 1, 14)

    def test_step_type_correction(self):
        text = "```action\ntype: sequence\nsteps:\n  - type: termnal.run\n    command: ls\n```"
        actions = fixes(text)

        assert [a.title for a in actions] == ["Change to 'terminal.run'"]

    def test_flow_mapping_edit_is_narrowed(self):
        """Only the misspelled identifier is replaced, the rest of the mapping survives"""
        actions = fixes("```action\n{type: file.opn, path: a.py}\n```")

        assert [a.title for a in actions] == ["Change to 'file.open'"]
        edit = only_edit(actions[0])
        assert edit.new_text == 'file.open'
        assert span(edit.range) == (1, 7, 1, 15)

    def test_identifier_outside_range_has_no_fix(self):
        document = DeckDocument.create(URI, 1, "```action\ntype: file.opn\n```")
        diagnostic = Diagnostic(
            range=range_make(0, 0, 0, 9),
            message="Unknown action type: 'file.opn'",
            code='ET003',
        )

        assert codeActions_get(document, diagnostic.range, [diagnostic]) == []

    def test_distant_type_has_no_fix(self):
        assert fixes("```action\ntype: completely.different\n```") == []


class TestMissingParameter:
    """Test insertion of missing required parameters"""

    def test_inserted_after_last_parameter(self):
        actions = fixes("```action\ntype: file.open\n```")

        assert [a.title for a in actions] == ["Add missing parameter 'path'"]
        edit = only_edit(actions[0])
        assert edit.new_text == "path: \n"
        assert span(edit.range) == (2, 0, 2, 0)

    def test_step_insertion_is_indented(self):
        """A step fix lands inside the step, aligned with its keys"""
        actions = fixes(SEQUENCE_DECK)
        insert = [a for a in actions if a.title == "Add missing parameter 'path'"][0]
        edit = only_edit(insert)

        assert edit.new_text == "    path: \n"
        assert span(edit.range) == (5, 0, 5, 0)


class TestUnknownParameter:
    """Test removal of unknown parameters"""

    def test_block_parameter_line_removed(self):
        actions = fixes("```action\ntype: file.open\npath: a.py\nbogus: 1\n```")

        assert [a.title for a in actions] == ["Remove unknown parameter 'bogus'"]
        edit = only_edit(actions[0])
        assert edit.new_text == ''
        assert span(edit.range) == (3, 0, 4, 0)

    def test_step_parameter_line_removed(self):
        actions = fixes(SEQUENCE_DECK)
        removal = [a for a in actions if a.title == "Remove unknown parameter 'colour'"][0]

        assert span(only_edit(removal).range) == (7, 0, 8, 0)

    def test_fallback_to_diagnostic_line(self):
        """Without a locatable parameter the diagnostic's own line is deleted"""
        document = DeckDocument.create(URI, 1, "# hi\nbody")
        diagnostic = Diagnostic(
            range=range_make(0, 0, 0, 1),
            message="Unknown parameter 'x' for action type 'file.open'",
            code='ET005',
        )
        actions = codeActions_get(document, diagnostic.range, [diagnostic])

        assert span(only_edit(actions[0]).range) == (0, 0, 1, 0)


class TestUnmatchedDiagnostics:
    """Test diagnostics that produce no fix"""

    def test_unparseable_message(self):
        document = DeckDocument.create(URI, 1, "```action\ntype: x\n```")
        diagnostic = Diagnostic(range=range_make(1, 6, 1, 7), message="something else", code='ET003')

        assert codeActions_get(document, diagnostic.range, [diagnostic]) == []

    def test_unrelated_code(self):
        actions = fixes("```action\ntype: file.open\n  bad: indent\n```")

        assert actions == []
