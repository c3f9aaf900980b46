"""
Document outline and folding regions

Symbols nest slide > action block > step, with render directives as slide
children. Folding covers frontmatter, multi-line slides and multi-line
action blocks.
"""

from typing import List

from lsprotocol.types import DocumentSymbol, FoldingRange, FoldingRangeKind, SymbolKind

from ..models.document import ActionBlock, RenderDirective, Slide
from .document import DeckDocument


def symbols_build(document: DeckDocument) -> List[DocumentSymbol]:
    """One Module symbol per slide, named by its title or "Slide N" (1-based)"""
    return [slideSymbol_build(slide) for slide in document.slides]


def slideSymbol_build(slide: Slide) -> DocumentSymbol:
    children = [actionBlockSymbol_build(block) for block in slide.action_blocks]
    children.extend(renderDirectiveSymbol_build(directive) for directive in slide.render_directives)
    return DocumentSymbol(
        name=slide.title or f"Slide {slide.index + 1}",
        kind=SymbolKind.Module,
        range=slide.range,
        selection_range=slide.range,
        children=children,
    )


def actionBlockSymbol_build(block: ActionBlock) -> DocumentSymbol:
    steps = [
        DocumentSymbol(
            name=f"step {step.index + 1}: {step.action_type or 'unknown'}",
            kind=SymbolKind.Event,
            range=step.range,
            selection_range=step.type_range or step.range,
        )
        for step in block.steps
    ]
    return DocumentSymbol(
        name=f"action: {block.action_type or 'unknown'}",
        kind=SymbolKind.Function,
        range=block.range,
        selection_range=block.type_range or block.range,
        children=steps or None,
    )


def renderDirectiveSymbol_build(directive: RenderDirective) -> DocumentSymbol:
    return DocumentSymbol(
        name=f"render: {directive.type}",
        kind=SymbolKind.Object,
        range=directive.range,
        selection_range=directive.type_range,
    )


def foldingRanges_build(document: DeckDocument) -> List[FoldingRange]:
    """
    Collapsible regions

    Returns:
        Frontmatter first, then every slide spanning more than one line,
        then every action block spanning more than one line
    """
    ranges: List[FoldingRange] = []

    if document.frontmatter_range is not None:
        ranges.append(FoldingRange(
            start_line=document.frontmatter_range.start.line,
            end_line=document.frontmatter_range.end.line,
            kind=FoldingRangeKind.Region,
        ))

    for slide in document.slides:
        if slide.range.end.line > slide.range.start.line:
            ranges.append(FoldingRange(
                start_line=slide.range.start.line,
                end_line=slide.range.end.line,
                kind=FoldingRangeKind.Region,
            ))

    for slide in document.slides:
        for block in slide.action_blocks:
            if block.range.end.line > block.range.start.line:
                ranges.append(FoldingRange(
                    start_line=block.range.start.line,
                    end_line=block.range.end.line,
                    kind=FoldingRangeKind.Region,
                ))

    return ranges
