"""
Error taxonomy for the extraction and sync pipelines.

Every failure the pipelines know about is one of these exception types.
Most of them are recovered locally (logged, skipped or retried) and never
abort sibling work. Only two are fatal for a whole run:

    - DirectoryReadFailure: the input documents cannot be enumerated
    - UploadFailure: a chunk could not be stored after all retries

Python Learning Notes:
    - A shared base class lets callers catch every pipeline error at once
    - Extra attributes (document_id, reason) carry context for log messages
"""

from typing import Optional


class PipelineError(Exception):
    """Base class for all pipeline errors."""


class SegmentationEmpty(PipelineError):
    """A document produced no proposal segments. The document is skipped."""

    def __init__(self, document_id: str):
        super().__init__(f"No proposal segments found in {document_id}")
        self.document_id = document_id


class ExtractionFailure(PipelineError):
    """
    The oracle call failed at the transport or schema level.

    Raised inside ExtractionClient and converted to an empty result
    once its retry budget is spent.
    """


class ValidationFailure(PipelineError):
    """A record violated the taxonomy, enum or non-empty invariants."""

    def __init__(self, reason: str, segment_index: Optional[int] = None):
        super().__init__(reason)
        self.reason = reason
        self.segment_index = segment_index


class EmbeddingFailure(PipelineError):
    """The embedding service could not produce a vector. Non-fatal."""


class UploadFailure(PipelineError):
    """A chunk could not be inserted after all retries. Fatal."""

    def __init__(self, message: str, chunk_index: int, attempts: int):
        super().__init__(message)
        self.chunk_index = chunk_index
        self.attempts = attempts


class DirectoryReadFailure(PipelineError):
    """The input directory could not be enumerated. Fatal at startup."""
