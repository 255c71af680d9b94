"""
Unit tests for consensus over repeated extraction attempts.

Test Categories:
    - vote(): majority, first-seen tie-break, None vs 0, list equality
    - merge_attempts(): baseline choice, positional voting, empty attempts
    - ConsensusResolver: attempt scheduling, pairing by index, modes
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from budgetproposals.processors.consensus import (
    ConsensusMode,
    ConsensusResolver,
    merge_attempts,
    vote,
)
from budgetproposals.processors.schema import CandidateRecord


def record(make_proposal, **overrides):
    return CandidateRecord(**make_proposal(**overrides))


class TestVote:
    def test_majority_wins(self):
        assert vote([100, 100, 200]) == 100
        assert vote([200, 100, 100]) == 100

    def test_all_distinct_takes_first_seen(self):
        assert vote([100, 200, 300]) == 100

    def test_tie_takes_first_seen(self):
        assert vote([300, 200, 200, 300]) == 300

    def test_none_is_distinct_from_zero(self):
        assert vote([None, 0, 0]) == 0
        assert vote([None, None, 0]) is None

    def test_lists_compare_in_order(self):
        assert vote([["a", "b"], ["b", "a"], ["b", "a"]]) == ["b", "a"]


class TestMergeAttempts:
    def test_frozen_amount_majority(self, make_proposal):
        attempts = [
            [record(make_proposal, frozen=100)],
            [record(make_proposal, frozen=100)],
            [record(make_proposal, frozen=200)],
        ]

        assert merge_attempts(attempts)[0].frozen == 100

    def test_three_way_split_keeps_first_attempt(self, make_proposal):
        attempts = [
            [record(make_proposal, frozen=100)],
            [record(make_proposal, frozen=200)],
            [record(make_proposal, frozen=300)],
        ]

        assert merge_attempts(attempts)[0].frozen == 100

    def test_structural_fields_come_from_baseline(self, make_proposal):
        attempts = [
            [record(make_proposal, content="基準", action="凍結", frozen=100)],
            [record(make_proposal, content="其他", action="減列", frozen=200)],
            [record(make_proposal, content="其他", action="減列", frozen=200)],
        ]

        merged = merge_attempts(attempts)[0]

        assert merged.content == "基準"
        assert merged.action == "減列"
        assert merged.frozen == 200

    def test_baseline_is_first_non_empty_attempt(self, make_proposal):
        attempts = [
            [],
            [record(make_proposal, content="第二次", frozen=1)],
            [record(make_proposal, content="第三次", frozen=2)],
        ]

        merged = merge_attempts(attempts)

        assert len(merged) == 1
        assert merged[0].content == "第二次"
        assert merged[0].frozen == 1

    def test_votes_per_position(self, make_proposal):
        attempts = [
            [record(make_proposal, cost=1), record(make_proposal, cost=10)],
            [record(make_proposal, cost=2), record(make_proposal, cost=20)],
            [record(make_proposal, cost=2)],
        ]

        merged = merge_attempts(attempts)

        assert [item.cost for item in merged] == [2, 10]

    def test_record_count_follows_baseline(self, make_proposal):
        attempts = [
            [record(make_proposal)],
            [record(make_proposal), record(make_proposal), record(make_proposal)],
        ]

        assert len(merge_attempts(attempts)) == 1

    def test_all_empty(self):
        assert merge_attempts([[], [], []]) == []
        assert merge_attempts([]) == []

    def test_deterministic(self, make_proposal):
        attempts = [
            [record(make_proposal, frozen=1, deleted=5)],
            [record(make_proposal, frozen=2, deleted=5)],
            [record(make_proposal, frozen=2, deleted=None)],
        ]

        assert merge_attempts(attempts) == merge_attempts(attempts)


class TestConsensusResolver:
    """Tests for ConsensusResolver.resolve()."""

    @pytest.mark.asyncio
    async def test_results_are_paired_by_attempt_index(self, make_proposal):
        """The first attempt is the baseline even when it finishes last."""
        delays = {0: 0.03, 1: 0.0, 2: 0.01}
        calls = []

        async def extract(text, error_context=None):
            attempt = len(calls)
            calls.append(attempt)
            await asyncio.sleep(delays[attempt])
            return [record(make_proposal, content=f"attempt {attempt}", frozen=attempt)]

        client = MagicMock()
        client.extract = AsyncMock(side_effect=extract)
        resolver = ConsensusResolver(client, ConsensusMode.FREQUENCY_VOTE, attempts=3)

        merged = await resolver.resolve("segment")

        assert merged[0].content == "attempt 0"
        assert merged[0].frozen == 0
        assert client.extract.await_count == 3

    @pytest.mark.asyncio
    async def test_failed_attempt_counts_as_empty(self, make_proposal):
        client = MagicMock()
        client.extract = AsyncMock(
            side_effect=[
                RuntimeError("boom"),
                [record(make_proposal, frozen=7)],
                [record(make_proposal, frozen=7)],
            ]
        )
        resolver = ConsensusResolver(client, attempts=3, concurrency=1)

        merged = await resolver.resolve("segment")

        assert merged[0].frozen == 7

    @pytest.mark.asyncio
    async def test_error_context_is_forwarded(self):
        client = MagicMock()
        client.extract = AsyncMock(return_value=[])
        resolver = ConsensusResolver(client, attempts=2)

        await resolver.resolve("segment", "- reason")

        for call in client.extract.await_args_list:
            assert call.args == ("segment", "- reason")

    @pytest.mark.asyncio
    async def test_single_attempt_mode(self, make_proposal):
        client = MagicMock()
        client.extract = AsyncMock(return_value=[record(make_proposal, frozen=3)])
        resolver = ConsensusResolver(client, ConsensusMode.SINGLE_ATTEMPT, attempts=5)

        merged = await resolver.resolve("segment")

        assert resolver.attempts == 1
        assert client.extract.await_count == 1
        assert merged[0].frozen == 3

    def test_mode_accepts_config_strings(self):
        resolver = ConsensusResolver(MagicMock(), "single_attempt")

        assert resolver.mode is ConsensusMode.SINGLE_ATTEMPT
