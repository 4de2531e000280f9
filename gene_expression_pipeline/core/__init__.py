#!/usr/bin/env python3

"""
Core module for the gene expression pipeline.

Contains fundamental data structures, exception types, configuration
management and the processing stages.
"""

from .data_structures import (
    Match, Transcript, ExonFragment, SpliceVariant, CodingSequence,
    CodonEntry, CodonTable, ProteinRecord, TranscriptResult, ExpressionResult
)
from .exceptions import (
    PipelineError, ParseError, InputUnavailableError, SequenceError,
    ConfigurationError, MemoryError
)
from .config import PipelineConfig, load_config

__all__ = [
    'Match', 'Transcript', 'ExonFragment', 'SpliceVariant', 'CodingSequence',
    'CodonEntry', 'CodonTable', 'ProteinRecord', 'TranscriptResult', 'ExpressionResult',
    'PipelineError', 'ParseError', 'InputUnavailableError', 'SequenceError',
    'ConfigurationError', 'MemoryError',
    'PipelineConfig', 'load_config'
]
