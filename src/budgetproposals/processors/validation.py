"""
Schema validation for extracted proposal records.

The pydantic models in ``schema`` guarantee shape and types. This gate
enforces the domain invariants that the oracle is most likely to break:

    1. ``category`` is one of the taxonomy labels
    2. ``content`` is non-empty after trimming whitespace
    3. ``action`` is one of the closed action values

Checks run in that order and the first failure is reported. A failing
record is rejected whole; no field is repaired.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .schema import ACTION_VALUES, CandidateRecord
from .taxonomy import is_known_category


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one record; ``reason`` is None when valid."""

    valid: bool
    reason: Optional[str] = None


class ValidationGate:
    """
    Accepts or rejects candidate records against the closed schema.

    Example:
        gate = ValidationGate()
        result = gate.validate(record)
        if not result.valid:
            logger.warning("Rejected record: %s", result.reason)
    """

    def validate(self, record: CandidateRecord) -> ValidationResult:
        if not is_known_category(record.category):
            return ValidationResult(
                False, f"category「{record.category}」不在分類清單中"
            )
        if not record.content.strip():
            return ValidationResult(False, "content 不可為空白")
        if record.action not in ACTION_VALUES:
            return ValidationResult(
                False,
                f"action「{record.action}」必須是 {'、'.join(ACTION_VALUES)} 之一",
            )
        return ValidationResult(True)

    def partition(
        self, records: Iterable[CandidateRecord]
    ) -> Tuple[List[CandidateRecord], List[Tuple[CandidateRecord, str]]]:
        """
        Split records into accepted ones and rejected ones with reasons.

        Args:
            records: Candidate records of one segment.

        Returns:
            Tuple of (accepted records, [(rejected record, reason), ...]),
            both in input order.
        """
        accepted: List[CandidateRecord] = []
        rejected: List[Tuple[CandidateRecord, str]] = []
        for record in records:
            result = self.validate(record)
            if result.valid:
                accepted.append(record)
            else:
                rejected.append((record, result.reason or "invalid record"))
        return accepted, rejected
