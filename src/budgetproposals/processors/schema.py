"""
Pydantic schemas for budget proposal records.

This module defines the record shapes that flow through the pipeline and
the strict JSON schema handed to the extraction oracle:

    - CandidateRecord: one record as returned by a single extraction attempt
    - ProposalRecord: an accepted record, tagged with its committee
    - EnrichedRecord: an accepted record plus its embedding vector

The pydantic models check shape and types (lists, non-negative integers).
Membership in the closed category taxonomy and the action enum is checked
separately by the ValidationGate so a rejected record can be reported with
a reason and re-submitted.

Python Learning Notes:
    - Pydantic validates data at runtime and provides type hints
    - field_validator(mode="before") can normalize input before validation
    - NonNegativeInt rejects negative amounts at parse time
    - frozen=True makes accepted records immutable
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_validator

from .taxonomy import CATEGORY_NAMES


class ProposalAction(str, Enum):
    """Closed set of actions a proposal can request."""

    APPROVE = "照列"
    REDUCE = "減列"
    FREEZE = "凍結"
    INCREASE = "增列"
    REDUCE_AND_FREEZE = "減列與凍結"
    OTHER = "其他建議"


ACTION_VALUES = tuple(action.value for action in ProposalAction)

# Fields copied verbatim from the baseline attempt during consensus
STRUCTURAL_FIELDS = ("category", "content", "proposer", "co_signers", "remarks")

# Fields decided by frequency vote across attempts
VOLATILE_FIELDS = ("cost", "frozen", "deleted", "added", "action")

AMOUNT_FIELDS = ("cost", "frozen", "deleted", "added")


class CandidateRecord(BaseModel):
    """
    One proposal as extracted by a single oracle attempt.

    Amounts are in 元 (the smallest currency unit). ``category`` and
    ``action`` are plain strings here; the ValidationGate decides whether
    they belong to the closed sets.
    """

    model_config = ConfigDict(frozen=True)

    category: str = Field(description="分類")
    content: str = Field(description="提案內容")
    action: str = Field(description="行動")
    proposer: List[str] = Field(default_factory=list, description="提案人")
    co_signers: List[str] = Field(default_factory=list, description="連署人")
    cost: Optional[NonNegativeInt] = Field(default=None, description="預算金額")
    frozen: Optional[NonNegativeInt] = Field(default=None, description="凍結金額")
    deleted: Optional[NonNegativeInt] = Field(default=None, description="減列金額")
    added: Optional[NonNegativeInt] = Field(default=None, description="增列金額")
    remarks: Optional[str] = Field(default=None, description="其他備註")

    @field_validator("proposer", "co_signers", mode="before")
    @classmethod
    def _none_to_empty_list(cls, value: Any) -> Any:
        return [] if value is None else value

    def amounts(self) -> Dict[str, Optional[int]]:
        """Return the four amount fields keyed by name."""
        return {name: getattr(self, name) for name in AMOUNT_FIELDS}


class ProposalRecord(CandidateRecord):
    """An accepted proposal, owned by exactly one committee."""

    committee: str = Field(description="委員會")

    @classmethod
    def from_candidate(cls, candidate: CandidateRecord, committee: str) -> "ProposalRecord":
        return cls(**candidate.model_dump(), committee=committee)


class EnrichedRecord(ProposalRecord):
    """
    A ProposalRecord with its embedding vector.

    ``vector`` is None when the embedding request failed; the record is
    still uploaded. ``document_id`` and ``position`` record where the record
    came from; they form the point id and are not part of the stored payload.
    """

    vector: Optional[List[float]] = None
    document_id: str = ""
    position: int = 0

    def to_payload(self) -> Dict[str, Any]:
        """Return the destination row without vector and provenance."""
        return self.model_dump(mode="json", exclude={"vector", "document_id", "position"})


def sort_records(records: Iterable[ProposalRecord]) -> List[ProposalRecord]:
    """Sort records by category, then by content."""
    return sorted(records, key=lambda record: (record.category, record.content))


def proposal_json_schema() -> Dict[str, Any]:
    """
    Build the strict JSON schema for the ``submit_proposals`` tool.

    OpenAI strict function calling requires every property to be listed in
    ``required`` and ``additionalProperties`` to be false; optional values
    are expressed as nullable types instead.

    Returns:
        Dict[str, Any]: JSON schema of ``{"proposals": [record, ...]}``.
    """
    nullable_amount = {"type": ["integer", "null"]}
    record_schema = {
        "type": "object",
        "properties": {
            "category": {
                "type": "string",
                "enum": list(CATEGORY_NAMES),
                "description": "分類",
            },
            "content": {"type": "string", "description": "提案內容"},
            "action": {
                "type": "string",
                "enum": list(ACTION_VALUES),
                "description": "行動",
            },
            "proposer": {
                "type": "array",
                "items": {"type": "string"},
                "description": "提案人",
            },
            "co_signers": {
                "type": ["array", "null"],
                "items": {"type": "string"},
                "description": "連署人",
            },
            "cost": {**nullable_amount, "description": "預算金額（元）"},
            "frozen": {**nullable_amount, "description": "凍結金額（元）"},
            "deleted": {**nullable_amount, "description": "減列金額（元）"},
            "added": {**nullable_amount, "description": "增列金額（元）"},
            "remarks": {"type": ["string", "null"], "description": "其他備註"},
        },
        "required": [
            "category",
            "content",
            "action",
            "proposer",
            "co_signers",
            "cost",
            "frozen",
            "deleted",
            "added",
            "remarks",
        ],
        "additionalProperties": False,
    }
    return {
        "type": "object",
        "properties": {"proposals": {"type": "array", "items": record_schema}},
        "required": ["proposals"],
        "additionalProperties": False,
    }
