"""
Program state model and pipeline helper

Defines the ProgramState dataclass carried through the batch linter's
functional pipeline and the pipeline() helper that composes its stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Dict, List, Optional, Type, TypeVar, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the lint pipeline (state bus pattern).

    Each stage receives a copy of the state, adds its own fields, and hands
    it on.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, pattern, reportFile, strict
        - env_check: deckFiles, envOK
        - decks_parse: documents
        - diagnostics_compute: diagnostics
        - report_write: reportPath, errorCount, warningCount
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory searched for decks
        outputdir: Directory receiving the JSON report
        verbosity: Logging verbosity level (1-3)
        pattern: Glob (relative to inputdir) selecting deck files
        reportFile: Report filename inside outputdir
        strict: Count warnings as failures
        envOK: Environment validation passed
        deckFiles: Deck files found by env_check
        documents: Parsed DeckDocument per deck file
        diagnostics: lsprotocol Diagnostic lists keyed by deck path
        reportPath: Path of the written report
        errorCount: Total Error diagnostics
        warningCount: Total Warning diagnostics
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    pattern: str = field(default="**/*.deck.md")
    reportFile: str = field(default="diagnostics.json")
    strict: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    deckFiles: List[Path] = field(default_factory=list)
    documents: Dict[Path, Any] = field(default_factory=dict)  # DeckDocument at runtime
    diagnostics: Optional[Dict[Path, List[Any]]] = field(default=None)
    reportPath: Path = field(default=Path("/"))
    errorCount: int = field(default=0)
    warningCount: int = field(default=0)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Options without a matching field are ignored.

        Args:
            options: Parsed CLI arguments (pattern, reportFile, ...)
            inputdir: Directory searched for decks
            outputdir: Directory for the report

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}
        filtered_options = {k: v for k, v in vars(options).items() if k in valid_fields}
        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}
        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            decks_parse,
            diagnostics_compute,
            report_write,
            results_report,
        )

    is results_report(report_write(...(env_check(initial_state)))) read
    left-to-right.
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
