"""
Consensus over repeated extraction attempts.

A single oracle generation is unreliable, especially for amounts. In
frequency-vote mode the same segment is extracted several times and the
volatile fields are decided by majority:

    - The baseline is the first attempt (by attempt index, not by completion
      order) that returned at least one record. Its record count and its
      structural fields (category, content, proposer, co_signers, remarks)
      are kept as they are.
    - For every array position of the baseline, each volatile field (cost,
      frozen, deleted, added, action) takes the value that occurs most often
      at that position across all attempts having a record there.
    - Ties go to the value seen first in attempt order.

Values are compared with ``==``: numbers and strings exactly, ``None``
distinct from ``0``, lists element by element in order.
"""

from enum import Enum
from typing import Any, List, Optional, Sequence

from ..utils import get_logger
from ..utils.scheduler import ConcurrencyScheduler
from .extraction import ExtractionClient
from .schema import VOLATILE_FIELDS, CandidateRecord

logger = get_logger(__name__)


class ConsensusMode(str, Enum):
    FREQUENCY_VOTE = "frequency_vote"
    SINGLE_ATTEMPT = "single_attempt"


def vote(values: Sequence[Any]) -> Any:
    """
    Return the most frequent value, preferring the first seen on ties.

    Example:
        >>> vote([100, 200, 100])
        100
        >>> vote([100, 200, 300])
        100
    """
    tallies: List[List[Any]] = []
    for value in values:
        for tally in tallies:
            if tally[0] == value:
                tally[1] += 1
                break
        else:
            tallies.append([value, 1])

    best = tallies[0]
    for tally in tallies[1:]:
        if tally[1] > best[1]:
            best = tally
    return best[0]


def merge_attempts(attempts: Sequence[List[CandidateRecord]]) -> List[CandidateRecord]:
    """
    Merge per-attempt record lists into one consensus list.

    Args:
        attempts: Record lists ordered by attempt index. Failed attempts
            are empty lists.

    Returns:
        List[CandidateRecord]: Records shaped like the baseline attempt with
            voted volatile fields; ``[]`` when every attempt is empty.
    """
    baseline = next((records for records in attempts if records), None)
    if baseline is None:
        return []

    merged = []
    for position, base in enumerate(baseline):
        updates = {}
        for name in VOLATILE_FIELDS:
            values = [
                getattr(records[position], name)
                for records in attempts
                if len(records) > position
            ]
            updates[name] = vote(values)
        merged.append(base.model_copy(update=updates))
    return merged


class ConsensusResolver:
    """
    Produces one record list per segment from one or more oracle attempts.

    Attributes:
        client (ExtractionClient): Oracle client used for every attempt
        mode (ConsensusMode): Frequency vote or single attempt
        attempts (int): Attempts per segment (1 in single-attempt mode)
        scheduler (ConcurrencyScheduler): Bounds attempts in flight

    Example:
        resolver = ConsensusResolver(client, ConsensusMode.FREQUENCY_VOTE, attempts=3)
        records = await resolver.resolve(segment.text)
    """

    def __init__(
        self,
        client: ExtractionClient,
        mode: ConsensusMode = ConsensusMode.FREQUENCY_VOTE,
        attempts: int = 3,
        concurrency: int = 3,
    ):
        self.client = client
        self.mode = ConsensusMode(mode)
        self.attempts = 1 if self.mode is ConsensusMode.SINGLE_ATTEMPT else attempts
        self.scheduler = ConcurrencyScheduler(limit=concurrency)

    async def resolve(
        self, segment_text: str, error_context: Optional[str] = None
    ) -> List[CandidateRecord]:
        """
        Extract a segment and reconcile the attempts.

        Args:
            segment_text: Normalized proposal segment.
            error_context: Validation feedback forwarded to every attempt.

        Returns:
            List[CandidateRecord]: Consensus records, possibly empty.
        """
        if self.mode is ConsensusMode.SINGLE_ATTEMPT:
            return await self.client.extract(segment_text, error_context)

        outcomes = await self.scheduler.map(
            list(range(self.attempts)),
            lambda _: self.client.extract(segment_text, error_context),
        )

        results: List[List[CandidateRecord]] = []
        for outcome in outcomes:
            if outcome.ok:
                results.append(outcome.value or [])
            else:
                logger.warning("Attempt %d failed: %s", outcome.index, outcome.error)
                results.append([])

        logger.debug(
            "Attempt record counts: %s", [len(records) for records in results]
        )
        return merge_attempts(results)
