"""
Structural diagnostics for deck documents

Walks every slide of a parsed DeckDocument and reports coded defects in its
action blocks, sequence steps, inline action links and render directives.

Codes:
    ET001  YAML parse error                     Error
    ET002  action block without `type`          Error
    ET003  unknown action type                  Error
    ET004  missing required parameter           Error
    ET005  unknown parameter                    Warning
    ET006  step without `type`                  Error
    ET007  unknown step type                    Error
    ET008  step missing required parameter      Error
    ET009  unknown step parameter               Warning
    ET010  unclosed action block                Warning
    ET011  unknown action type in inline link   Error
    ET012  unknown inline link parameter        Warning
    ET013  unknown render type                  Error
    ET014  unknown render parameter             Warning
    ET015  empty action block                   Hint

The message texts are parsed back by the quick-fix engine (codeactions.py);
keep both sides in sync.
"""

from typing import List, Optional

from lsprotocol.types import Diagnostic, DiagnosticSeverity, Range

from ..config import appsettings
from ..models.actions import RENDER_PARAMETERS, metaField_is
from ..models.document import ActionBlock, ActionLink, RenderDirective, StepRange, range_make
from .actions import ActionRegistry
from .document import DeckDocument


YAML_PARSE_ERROR = 'ET001'
MISSING_TYPE = 'ET002'
UNKNOWN_TYPE = 'ET003'
MISSING_REQUIRED_PARAM = 'ET004'
UNKNOWN_PARAM = 'ET005'
STEP_MISSING_TYPE = 'ET006'
STEP_UNKNOWN_TYPE = 'ET007'
STEP_MISSING_REQUIRED_PARAM = 'ET008'
STEP_UNKNOWN_PARAM = 'ET009'
UNCLOSED_BLOCK = 'ET010'
INLINE_LINK_UNKNOWN_TYPE = 'ET011'
INLINE_LINK_UNKNOWN_PARAM = 'ET012'
RENDER_UNKNOWN_TYPE = 'ET013'
RENDER_UNKNOWN_PARAM = 'ET014'
EMPTY_BLOCK = 'ET015'


def diagnostic_make(code: str, message: str, range: Range, severity: DiagnosticSeverity) -> Diagnostic:
    return Diagnostic(
        range=range,
        message=message,
        severity=severity,
        source=appsettings.diagnostic_source,
        code=code,
    )


def diagnostics_compute(document: DeckDocument, registry: Optional[ActionRegistry] = None) -> List[Diagnostic]:
    """
    Compute all diagnostics for a document

    Args:
        document: Parsed deck
        registry: Action catalog (a fresh built-in registry if omitted)

    Returns:
        Diagnostics in document order: per slide, blocks then links then
        render directives
    """
    registry = registry or ActionRegistry()
    diagnostics: List[Diagnostic] = []

    for slide in document.slides:
        for block in slide.action_blocks:
            diagnostics.extend(actionBlock_validate(block, registry))
        for link in slide.action_links:
            diagnostics.extend(actionLink_validate(link, registry))
        for directive in slide.render_directives:
            diagnostics.extend(renderDirective_validate(directive))

    return diagnostics


def actionBlock_validate(block: ActionBlock, registry: ActionRegistry) -> List[Diagnostic]:
    """Validate one fenced action block; each failed gate skips the checks after it"""
    diagnostics: List[Diagnostic] = []

    if block.unclosed:
        line = block.range.start.line
        diagnostics.append(diagnostic_make(
            UNCLOSED_BLOCK,
            'Unclosed action block: missing closing fence',
            range_make(line, 0, line, 10),
            DiagnosticSeverity.Warning,
        ))

    if block.parse_error is not None:
        diagnostics.append(diagnostic_make(
            YAML_PARSE_ERROR,
            block.parse_error.message,
            block.parse_error.range,
            DiagnosticSeverity.Error,
        ))
        return diagnostics

    if not block.parsed_yaml or not block.yaml_content.strip():
        diagnostics.append(diagnostic_make(
            EMPTY_BLOCK,
            'Empty action block',
            block.range,
            DiagnosticSeverity.Hint,
        ))
        return diagnostics

    if not block.action_type:
        line = block.content_range.start.line
        diagnostics.append(diagnostic_make(
            MISSING_TYPE,
            "Action block must have a 'type' field",
            range_make(line, 0, line, len(block.yaml_content.split('\n')[0])),
            DiagnosticSeverity.Error,
        ))
        return diagnostics

    action_type = block.action_type
    if not registry.known_is(action_type):
        diagnostics.append(diagnostic_make(
            UNKNOWN_TYPE,
            f"Unknown action type: '{action_type}'",
            block.type_range or block.content_range,
            DiagnosticSeverity.Error,
        ))
        return diagnostics

    present = [p.key for p in block.parameters]
    insert_line = block.content_range.end.line
    for required in registry.requiredParams_get(action_type):
        if required not in present:
            diagnostics.append(diagnostic_make(
                MISSING_REQUIRED_PARAM,
                f"Missing required parameter: '{required}'",
                range_make(insert_line, 0, insert_line, 0),
                DiagnosticSeverity.Error,
            ))

    valid = registry.paramNames_get(action_type)
    for param in block.parameters:
        if param.key not in valid and not metaField_is(param.key):
            diagnostics.append(diagnostic_make(
                UNKNOWN_PARAM,
                f"Unknown parameter '{param.key}' for action type '{action_type}'",
                param.key_range,
                DiagnosticSeverity.Warning,
            ))

    if action_type == appsettings.sequence_type:
        for step in block.steps:
            diagnostics.extend(step_validate(step, registry))

    return diagnostics


def step_validate(step: StepRange, registry: ActionRegistry) -> List[Diagnostic]:
    """Validate one sequence step with the block rules under step codes"""
    diagnostics: List[Diagnostic] = []

    if not step.action_type:
        line = step.range.start.line
        diagnostics.append(diagnostic_make(
            STEP_MISSING_TYPE,
            "Each step must have a 'type' field",
            range_make(line, 0, line, 20),
            DiagnosticSeverity.Error,
        ))
        return diagnostics

    step_type = step.action_type
    if not registry.known_is(step_type):
        diagnostics.append(diagnostic_make(
            STEP_UNKNOWN_TYPE,
            f"Unknown action type in step: '{step_type}'",
            step.type_range or step.range,
            DiagnosticSeverity.Error,
        ))
        return diagnostics

    present = [p.key for p in step.parameters]
    insert_line = step.range.end.line
    for required in registry.requiredParams_get(step_type):
        if required not in present:
            diagnostics.append(diagnostic_make(
                STEP_MISSING_REQUIRED_PARAM,
                f"Step missing required parameter: '{required}'",
                range_make(insert_line, 0, insert_line, 0),
                DiagnosticSeverity.Error,
            ))

    valid = registry.paramNames_get(step_type)
    for param in step.parameters:
        if param.key not in valid and not metaField_is(param.key):
            diagnostics.append(diagnostic_make(
                STEP_UNKNOWN_PARAM,
                f"Unknown parameter '{param.key}' for step type '{step_type}'",
                param.key_range,
                DiagnosticSeverity.Warning,
            ))

    return diagnostics


def actionLink_validate(link: ActionLink, registry: ActionRegistry) -> List[Diagnostic]:
    diagnostics: List[Diagnostic] = []

    if not registry.known_is(link.type):
        diagnostics.append(diagnostic_make(
            INLINE_LINK_UNKNOWN_TYPE,
            f"Unknown action type in inline link: '{link.type}'",
            link.type_range,
            DiagnosticSeverity.Error,
        ))
        return diagnostics

    valid = registry.paramNames_get(link.type)
    for key, param in link.params.items():
        if key not in valid and not metaField_is(key):
            diagnostics.append(diagnostic_make(
                INLINE_LINK_UNKNOWN_PARAM,
                f"Unknown parameter '{key}' for action type '{link.type}'",
                param.range,
                DiagnosticSeverity.Warning,
            ))

    return diagnostics


def renderDirective_validate(directive: RenderDirective) -> List[Diagnostic]:
    """
    Validate a render directive against the static allow-lists

    The directive pattern only admits known render types, so ET013 is
    reached only by directives built outside the document parser.
    """
    diagnostics: List[Diagnostic] = []

    valid = RENDER_PARAMETERS.get(directive.type)
    if valid is None:
        diagnostics.append(diagnostic_make(
            RENDER_UNKNOWN_TYPE,
            f"Unknown render type: '{directive.type}'",
            directive.type_range,
            DiagnosticSeverity.Error,
        ))
        return diagnostics

    for key, param in directive.params.items():
        if key not in valid:
            diagnostics.append(diagnostic_make(
                RENDER_UNKNOWN_PARAM,
                f"Unknown parameter '{key}' for render type '{directive.type}'",
                param.range,
                DiagnosticSeverity.Warning,
            ))

    return diagnostics
