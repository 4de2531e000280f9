#!/usr/bin/env python3

"""
Custom exceptions for the gene expression pipeline.

Provides specific exception types for better error handling and debugging.
"""

class PipelineError(Exception):
    """Base exception for all pipeline-related errors."""
    pass


class ParseError(PipelineError):
    """Error occurred during file parsing."""

    def __init__(self, message: str, filename: str = "", line_number: int = 0):
        super().__init__(message)
        self.filename = filename
        self.line_number = line_number

    def __str__(self):
        if self.filename and self.line_number:
            return f"Parse error in {self.filename} at line {self.line_number}: {super().__str__()}"
        elif self.filename:
            return f"Parse error in {self.filename}: {super().__str__()}"
        return super().__str__()


class InputUnavailableError(ParseError):
    """The input sequence source could not be read."""

    def __str__(self):
        if self.filename:
            return f"Input unavailable: {self.filename}: {Exception.__str__(self)}"
        return f"Input unavailable: {Exception.__str__(self)}"


class SequenceError(PipelineError):
    """Error occurred during sequence processing."""

    def __init__(self, message: str, sequence_id: str = "", sequence_type: str = ""):
        super().__init__(message)
        self.sequence_id = sequence_id
        self.sequence_type = sequence_type

    def __str__(self):
        if self.sequence_id and self.sequence_type:
            return f"Sequence error in {self.sequence_type} {self.sequence_id}: {super().__str__()}"
        elif self.sequence_id:
            return f"Sequence error in {self.sequence_id}: {super().__str__()}"
        return super().__str__()


class ConfigurationError(PipelineError):
    """Error in pipeline configuration."""
    pass


class MemoryError(PipelineError):
    """Memory usage exceeded limits."""

    def __init__(self, message: str, current_usage: float, limit: float):
        super().__init__(message)
        self.current_usage = current_usage
        self.limit = limit

    def __str__(self):
        return f"Memory error: {super().__str__()} (current: {self.current_usage:.1f}MB, limit: {self.limit:.1f}MB)"
