#!/usr/bin/env python3
"""
deckls - Structural linter for executable-talk decks

Runs the same analysis the deckls language server performs on open
documents, over every deck in a directory, and writes a JSON report.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Checks:
    - Action blocks: YAML syntax, `type`, required and unknown parameters
    - Sequence steps: the same rules per step
    - Inline [label](action:...) links and [label](render:...) directives
    - Unclosed and empty action blocks

Usage:
    deckls inputdir/ outputdir/ [--pattern GLOB] [--reportFile NAME]

    The report is written to outputdir/<reportFile>. The exit status is 1
    when any Error diagnostic was found (or any Warning with --strict).

Examples:
    # Lint every *.deck.md below the current directory
    deckls . out/

    # Plain markdown decks, verbose
    deckls talks/ out/ --pattern "*.md" -vv
"""

import sys
import json
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from lsprotocol import converters
from lsprotocol.types import DiagnosticSeverity

from .config import appsettings
from .lib import __version__, LOG, state_connectToLogger, ActionRegistry, DeckDocument
from .lib.diagnostics import diagnostics_compute as document_lint
from .models import ProgramState, pipeline


DISPLAY_TITLE = r"""
     _           _    _
  __| | ___  ___| | _| |___
 / _` |/ _ \/ __| |/ / / __|
| (_| |  __/ (__|   <| \__ \
 \__,_|\___|\___|_|\_\_|___/

  Deck structure linter
"""

parser = ArgumentParser(
    description="deckls - Structural linter for executable-talk decks",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--pattern",
    default=appsettings.deck_pattern,
    type=str,
    help="Glob (relative to inputdir) selecting the deck files to lint",
)

parser.add_argument(
    "--reportFile",
    default=appsettings.report_filename,
    type=str,
    help="Name of the JSON diagnostics report written to outputdir",
)

parser.add_argument(
    "--strict",
    action="store_true",
    default=appsettings.strict_mode,
    help="Fail on warnings as well as errors",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate the input directory and collect deck files.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - deckFiles: Sorted deck paths matching the pattern
            - envOK: True if environment is valid

    Exits:
        1 if inputdir does not exist or no deck matches the pattern
    """
    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if state.inputdir is None or not state.inputdir.is_dir():
        print(f"Error: Input directory not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.deckFiles = sorted(p for p in state.inputdir.glob(state.pattern) if p.is_file())
    if not state.deckFiles:
        print(f"Error: No decks matching '{state.pattern}' in {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)
    LOG(f"Found {len(state.deckFiles)} deck(s)", level=2)

    state.outputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.outputdir}", level=2)

    state.envOK = True
    return state


def decks_parse(inputstate: ProgramState) -> ProgramState:
    """
    Read and parse every deck into a DeckDocument.

    Returns:
        ProgramState with added field:
            - documents: DeckDocument per deck path

    Exits:
        1 if a deck cannot be read
    """
    state = inputstate.copy()
    state.documents = {}

    LOG("Parsing decks...", level=1)
    for deck in state.deckFiles:
        try:
            content = deck.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error reading deck {deck}: {e}", file=sys.stderr)
            sys.exit(1)
        document = DeckDocument.create(deck.resolve().as_uri(), 1, content)
        state.documents[deck] = document
        LOG(f"{deck.name}: {len(document.slides)} slides", level=2)
    return state


def diagnostics_compute(inputstate: ProgramState) -> ProgramState:
    """
    Run the structural checks over every parsed deck.

    Returns:
        ProgramState with added field:
            - diagnostics: Diagnostic list per deck path
    """
    state = inputstate.copy()
    registry = ActionRegistry()

    LOG("Computing diagnostics...", level=1)
    state.diagnostics = {
        deck: document_lint(document, registry) for deck, document in state.documents.items()
    }
    for deck, found in state.diagnostics.items():
        LOG(f"{deck.name}: {len(found)} diagnostic(s)", level=2)
    return state


def report_write(inputstate: ProgramState) -> ProgramState:
    """
    Write the JSON report and tally severities.

    The report maps each deck path (relative to inputdir) to its diagnostics
    in LSP wire shape, plus a summary block.

    Returns:
        ProgramState with added fields:
            - reportPath: Path of the written report
            - errorCount, warningCount: Severity totals

    Exits:
        1 if diagnostics were not computed or the report cannot be written
    """
    state = inputstate.copy()
    if state.diagnostics is None:
        print("Error: No diagnostics available", file=sys.stderr)
        sys.exit(1)

    converter = converters.get_converter()
    decks = {}
    for deck, found in state.diagnostics.items():
        decks[str(deck.relative_to(state.inputdir))] = [converter.unstructure(d) for d in found]
        state.errorCount += sum(1 for d in found if d.severity == DiagnosticSeverity.Error)
        state.warningCount += sum(1 for d in found if d.severity == DiagnosticSeverity.Warning)

    report = {
        "version": __version__,
        "decks": decks,
        "summary": {
            "decks": len(decks),
            "errors": state.errorCount,
            "warnings": state.warningCount,
        },
    }

    state.reportPath = state.outputdir / state.reportFile
    try:
        state.reportPath.write_text(json.dumps(report, indent=2), encoding="utf-8")
    except OSError as e:
        print(f"Error writing report: {e}", file=sys.stderr)
        sys.exit(1)
    LOG(f"Report written to {state.reportPath}", level=2)
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Summarize the lint run and set the exit status.

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if any Error diagnostic exists, or any Warning in strict mode
    """
    state: ProgramState = inputstate.copy()

    LOG(f"\n{len(state.documents)} deck(s) checked", level=1)
    LOG(f"  Errors:   {state.errorCount}", level=1)
    LOG(f"  Warnings: {state.warningCount}", level=1)
    LOG(f"  Report:   {state.reportPath}", level=1)

    if state.errorCount or (state.strict and state.warningCount):
        sys.exit(1)
    LOG("\n✓ All decks passed", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="deckls - Executable-talk deck linter",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - lint every deck under inputdir.

    Pipeline:
        1. env_check: Validate inputdir, collect deck files
        2. decks_parse: Build a DeckDocument per deck
        3. diagnostics_compute: Run the structural checks
        4. report_write: Write the JSON report
        5. results_report: Summarize and set the exit status

    Args:
        options: CLI arguments from argparse
            - pattern: str - Deck glob
            - reportFile: str - Report filename
            - strict: bool - Fail on warnings
            - verbosity: int - Logging verbosity level (1-3)
        inputdir: Directory containing decks
        outputdir: Directory receiving the report
    """
    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    state_connectToLogger(state)

    pipeline(state, env_check, decks_parse, diagnostics_compute, report_write, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
