"""
Centralized logging using Loguru with context-aware verbosity.

LOG() checks the verbosity of the ProgramState connected to the current
context, so engine modules can log without having state passed to them.

All output goes to stderr: when deckls runs as a language server over stdio,
stdout carries the JSON-RPC stream and must stay clean.

Usage:
    from lib.log import LOG, state_connectToLogger

    # Once per pipeline run, or before the server loop starts:
    state_connectToLogger(state)

    # Anywhere in that context:
    LOG("Published 3 diagnostics", level=1)
    LOG("Re-parsed file:///talk.deck.md (v7)", level=2)
    LOG("Typo candidates for 'file.opn': ['file.open']", level=3)
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

# ProgramState of the current context (pipeline run or server loop)
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<cyan>{module: <12}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

# LOG verbosity level -> loguru severity shown on stderr
SEVERITY = {1: "INFO", 2: "DEBUG", 3: "TRACE"}

logger.remove()
logger.add(sys.stderr, format=logger_format, level="TRACE")


def state_connectToLogger(state: Any) -> None:
    """
    Connect a ProgramState to the logging context.

    Tasks created afterwards on the same event loop inherit the connection,
    so calling this before the language server starts covers every handler.

    Args:
        state: Object with a `verbosity` attribute
    """
    _program_state.set(state)


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=debug)
        **kwargs: Additional loguru arguments

    Nothing is logged when no state is connected, which keeps the engines
    silent when used as a library.
    """
    state = _program_state.get()

    if state and hasattr(state, 'verbosity') and state.verbosity >= level:
        logger.opt(depth=1).log(SEVERITY.get(level, "TRACE"), message, **kwargs)
