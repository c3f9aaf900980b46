"""
Diagnostic engine tests

Tests the coded checks for action blocks, sequence steps, inline links and
render directives, including the early-return ordering of block checks.
"""

from lsprotocol.types import DiagnosticSeverity

from deckls.lib.diagnostics import diagnostics_compute, renderDirective_validate
from deckls.lib.document import DeckDocument
from deckls.models.document import RenderDirective, range_make


def lint(text: str):
    return diagnostics_compute(DeckDocument.create("file:///talk.deck.md", 1, text))


def codes(diagnostics):
    return [d.code for d in diagnostics]


def span(range):
    return (range.start.line, range.start.character, range.end.line, range.end.character)


class TestActionBlockChecks:
    """Test block-level checks ET001-ET005, ET010, ET015"""

    def test_valid_block_is_clean(self):
        assert lint("```action\ntype: file.open\npath: a.py\nlabel: Open\n```") == []

    def test_missing_required_parameter(self):
        """file.open without path: one ET004 naming path, no ET005"""
        diagnostics = lint("```action\ntype: file.open\n```")

        assert codes(diagnostics) == ['ET004']
        assert diagnostics[0].message == "Missing required parameter: 'path'"
        assert diagnostics[0].severity == DiagnosticSeverity.Error
        assert span(diagnostics[0].range) == (1, 0, 1, 0)

    def test_unknown_type_stops_checks(self):
        """Unknown type yields only ET003, pointed at the type value"""
        diagnostics = lint("```action\ntype: file.opn\nbogus: 1\n```")

        assert codes(diagnostics) == ['ET003']
        assert diagnostics[0].message == "Unknown action type: 'file.opn'"
        assert span(diagnostics[0].range) == (1, 6, 1, 14)

    def test_unknown_parameter(self):
        diagnostics = lint("```action\ntype: file.open\npath: a.py\nbogus: 1\n```")

        assert codes(diagnostics) == ['ET005']
        assert diagnostics[0].message == "Unknown parameter 'bogus' for action type 'file.open'"
        assert diagnostics[0].severity == DiagnosticSeverity.Warning
        assert span(diagnostics[0].range) == (3, 0, 3, 5)

    def test_yaml_error_stops_checks(self):
        diagnostics = lint("```action\ntype: file.open\n  bad: indent\n```")

        assert codes(diagnostics) == ['ET001']
        assert diagnostics[0].range.start.line == 2

    def test_missing_type(self):
        diagnostics = lint("```action\npath: a.py\n```")

        assert codes(diagnostics) == ['ET002']
        assert span(diagnostics[0].range) == (1, 0, 1, 10)

    def test_empty_block(self):
        diagnostics = lint("```action\n```")

        assert codes(diagnostics) == ['ET015']
        assert diagnostics[0].severity == DiagnosticSeverity.Hint
        assert span(diagnostics[0].range) == (0, 0, 1, 3)

    def test_unclosed_block_still_validated(self):
        """ET010 is reported alongside the remaining checks"""
        diagnostics = lint("# A\n```action\ntype: file.open")

        assert codes(diagnostics) == ['ET010', 'ET004']
        assert diagnostics[0].severity == DiagnosticSeverity.Warning
        assert span(diagnostics[0].range) == (1, 0, 1, 10)

    def test_deeply_nested_block(self):
        """A pathologically nested block still yields a document and one ET001"""
        diagnostics = lint("# A\n```action\ntype: " + "[" * 3000 + "\n```\n---\n# B")

        assert codes(diagnostics) == ['ET001']
        assert diagnostics[0].range.start.line == 2

    def test_source_is_set(self):
        diagnostics = lint("```action\ntype: nope\n```")

        assert diagnostics[0].source == "Executable Talk"


class TestSequenceChecks:
    """Test step-level checks ET006-ET009"""

    def test_step_rules(self):
        text = "\n".join([
            "```action",
            "type: sequence",
            "steps:",
            "  - type: file.open",      # 3: missing path
            "    line: 3",
            "  - type: termnal.run",    # 5: unknown type
            "  - type: terminal.run",   # 6
            "    command: ls",
            "    colour: red",          # 8: unknown param
            "  - type:",                # 9: no type
            "```",
        ])
        diagnostics = lint(text)

        assert codes(diagnostics) == ['ET008', 'ET007', 'ET009', 'ET006']
        assert diagnostics[0].message == "Step missing required parameter: 'path'"
        assert span(diagnostics[0].range) == (4, 0, 4, 0)
        assert diagnostics[1].message == "Unknown action type in step: 'termnal.run'"
        assert diagnostics[2].message == "Unknown parameter 'colour' for step type 'terminal.run'"
        assert span(diagnostics[2].range) == (8, 4, 8, 10)
        assert span(diagnostics[3].range) == (9, 0, 9, 20)

    def test_valid_sequence_is_clean(self):
        text = "```action\ntype: sequence\ndelay: 100\nsteps:\n  - type: file.open\n    path: a.py\n```"

        assert lint(text) == []


class TestInlineChecks:
    """Test inline link (ET011, ET012) and render directive (ET013, ET014) checks"""

    def test_unknown_link_type(self):
        diagnostics = lint("Run [it](action:termnal.run?command=ls)")

        assert codes(diagnostics) == ['ET011']
        assert diagnostics[0].message == "Unknown action type in inline link: 'termnal.run'"
        assert span(diagnostics[0].range) == (0, 16, 0, 27)

    def test_unknown_link_parameter(self):
        diagnostics = lint("[x](action:file.open?path=a.py&label=Go&zoom=2)")

        assert codes(diagnostics) == ['ET012']
        assert diagnostics[0].message == "Unknown parameter 'zoom' for action type 'file.open'"

    def test_unknown_render_parameter(self):
        diagnostics = lint("[x](render:command?cmd=ls&path=a)")

        assert codes(diagnostics) == ['ET014']
        assert diagnostics[0].message == "Unknown parameter 'path' for render type 'command'"
        assert diagnostics[0].severity == DiagnosticSeverity.Warning

    def test_unknown_render_type(self):
        """Only reachable for directives built outside the document parser"""
        directive = RenderDirective(
            range=range_make(0, 0, 0, 20),
            label="x",
            type="video",
            type_range=range_make(0, 11, 0, 16),
        )
        diagnostics = renderDirective_validate(directive)

        assert codes(diagnostics) == ['ET013']
        assert diagnostics[0].message == "Unknown render type: 'video'"

    def test_diagnostics_in_document_order(self):
        text = "[x](action:nope)\n```action\ntype: nope\n```\n---\n[y](render:file?bad=1)"

        assert codes(lint(text)) == ['ET003', 'ET011', 'ET014']
