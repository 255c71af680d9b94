"""
Document processing modules for BudgetProposals.

This package turns committee documents into validated proposal records and
prepares them for vector search.

The processors package includes:
    - segmenter: Splits a document into one segment per top-level proposal
    - extraction: Calls the OpenAI oracle with calculate/submit tools
    - consensus: Frequency vote across repeated extraction attempts
    - validation: Taxonomy, content and action checks for each record
    - embeddings: Vector generation for accepted records
    - schema / taxonomy: Record models and the closed category list

Example Usage:
    from budgetproposals.processors import (
        ConsensusResolver, ExtractionClient, ValidationGate, segment_document,
    )

    resolver = ConsensusResolver(ExtractionClient())
    for segment in segment_document("內政部/提案.md", text):
        candidates = await resolver.resolve(segment.text)
        accepted, rejected = ValidationGate().partition(candidates)

Python Learning Notes:
    - __all__ controls what's exported with "from processors import *"
    - Relative imports (.) reference modules in the same package
"""

from .consensus import ConsensusMode, ConsensusResolver, merge_attempts, vote
from .embeddings import EmbeddingGenerator, build_embedding_text
from .extraction import ExtractionClient, build_retry_prompt, calculate
from .schema import (
    CandidateRecord,
    EnrichedRecord,
    ProposalAction,
    ProposalRecord,
    sort_records,
)
from .segmenter import Segment, segment_document, split_proposals
from .taxonomy import CATEGORIES, CATEGORY_NAMES
from .validation import ValidationGate, ValidationResult

__all__ = [
    # Segmentation
    "Segment",
    "segment_document",
    "split_proposals",
    # Extraction
    "ExtractionClient",
    "build_retry_prompt",
    "calculate",
    # Consensus
    "ConsensusMode",
    "ConsensusResolver",
    "merge_attempts",
    "vote",
    # Validation
    "ValidationGate",
    "ValidationResult",
    # Embeddings
    "EmbeddingGenerator",
    "build_embedding_text",
    # Schemas
    "CandidateRecord",
    "ProposalRecord",
    "EnrichedRecord",
    "ProposalAction",
    "sort_records",
    "CATEGORIES",
    "CATEGORY_NAMES",
]
