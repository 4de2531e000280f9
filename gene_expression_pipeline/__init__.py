#!/usr/bin/env python3

"""
Gene Expression Pipeline

Simulates a simplified gene-expression pipeline over raw nucleotide text:
promoter/terminator detection, combinatorial splice-variant enumeration,
open reading frame extraction and codon translation with aggregate mass and
charge.

Modules:
- core: Data structures, exceptions, configuration, parsers, processing
  stages, output generation and the pipeline itself
- utils: Performance monitoring
- tests: Unit test suite
"""

__version__ = "1.0.0"
__author__ = "Gene Expression Pipeline Team"

from .core.data_structures import (
    Match, Transcript, ExonFragment, SpliceVariant, CodingSequence,
    CodonEntry, CodonTable, ProteinRecord, TranscriptResult, ExpressionResult
)
from .core.exceptions import (
    PipelineError, ParseError, InputUnavailableError, SequenceError,
    ConfigurationError, MemoryError
)
from .core.config import PipelineConfig, load_config
from .core.parsers import CodonTableParser, SequenceReader
from .core.pipeline import GeneExpressionPipeline

__all__ = [
    # Main pipeline
    'GeneExpressionPipeline',
    # Data structures
    'Match', 'Transcript', 'ExonFragment', 'SpliceVariant', 'CodingSequence',
    'CodonEntry', 'CodonTable', 'ProteinRecord', 'TranscriptResult', 'ExpressionResult',
    # Exceptions
    'PipelineError', 'ParseError', 'InputUnavailableError', 'SequenceError',
    'ConfigurationError', 'MemoryError',
    # Configuration
    'PipelineConfig', 'load_config',
    # Parsers
    'CodonTableParser', 'SequenceReader'
]
