"""
Pulsefile parsing: ``parse_pulsefile(text) -> PipelineDefinition``.
"""

import logging

from core.src.models.pipeline import PipelineDefinition
from core.src.parser.grammar import PULSEFILE_PARSER, parse_raw
from core.src.parser.resolve import resolve_defaults

logger = logging.getLogger(__name__)


def parse_pulsefile(text: str) -> PipelineDefinition:
    """Parse Pulsefile text. Raises ``ParseError`` on malformed input."""
    pipeline = resolve_defaults(parse_raw(text))
    logger.debug(f"Parsed pipeline '{pipeline.name}' v{pipeline.version} with {len(pipeline.steps)} steps")
    return pipeline


__all__ = ["parse_pulsefile", "parse_raw", "resolve_defaults", "PULSEFILE_PARSER"]
