"""
Shared test fixtures and configuration for BudgetProposals tests.

This module provides reusable fixtures and fakes for testing the extraction
and sync pipelines without network access. OpenAI responses are built from
SimpleNamespace objects shaped like the SDK's response models, so the code
under test reads them exactly as it reads real responses.

Key Fixtures:
    - make_proposal: Factory for oracle-shaped proposal dictionaries
    - make_tool_call / make_completion: Factories for chat completion fakes
    - fake_oracle: AsyncOpenAI stand-in that answers with calculate + submit
    - sample_document_text: A small committee document with two proposals
    - pipeline_config: PipelineConfig rooted in a temporary directory

Python Learning Notes:
    - conftest.py is automatically discovered by pytest
    - Fixtures defined here are available to all tests without import
    - A fixture can return a function, giving tests a small factory
"""

import json
from types import SimpleNamespace
from typing import Any, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest

from budgetproposals.utils.config import PipelineConfig

SAMPLE_DOCUMENT = """立法院第11屆第2會期 預算審查提案
說明：以下為委員提案。
(一)為加強國安管理，建議將相關預算凍結50萬元。
提案人：王小明
連署人：李大華、張三
(二)國家安全局業務費編列1,000萬元，建議減列100萬元，理由如下：
1.執行率偏低。
2.成效未明。
提案人：陳美玲
"""


def proposal_dict(**overrides: Any) -> Dict[str, Any]:
    proposal = {
        "category": "國安局",
        "content": "(一)為加強國安管理，建議將相關預算凍結50萬元。",
        "action": "凍結",
        "proposer": ["王小明"],
        "co_signers": ["李大華", "張三"],
        "cost": None,
        "frozen": 500000,
        "deleted": None,
        "added": None,
        "remarks": None,
    }
    proposal.update(overrides)
    return proposal


def tool_call(name: str, arguments: Any, call_id: str = "call_1") -> SimpleNamespace:
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments, ensure_ascii=False)
    return SimpleNamespace(
        id=call_id,
        type="function",
        function=SimpleNamespace(name=name, arguments=arguments),
    )


def completion(*tool_calls: SimpleNamespace, content: Any = None) -> SimpleNamespace:
    message = SimpleNamespace(content=content, tool_calls=list(tool_calls) or None)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def make_proposal():
    """
    Factory for proposal dictionaries as the oracle submits them.

    Usage:
        def test_something(make_proposal):
            proposal = make_proposal(frozen=None, action="其他建議")
    """
    return proposal_dict


@pytest.fixture
def make_tool_call():
    return tool_call


@pytest.fixture
def make_completion():
    return completion


def build_fake_oracle(proposals_per_call: List[List[Dict[str, Any]]]) -> MagicMock:
    """
    Build an AsyncOpenAI stand-in.

    Every conversation first gets a ``calculate`` call; once the tool result
    is in the messages, the next submission from ``proposals_per_call`` is
    returned (the last one repeats when the list runs out).
    """
    submissions = list(proposals_per_call)
    state = {"submitted": 0}

    async def create(**kwargs):
        messages = kwargs["messages"]
        if messages[-1]["role"] != "tool":
            return completion(
                tool_call("calculate", {"operation": "multiply", "a": 50, "b": 10000})
            )
        index = min(state["submitted"], len(submissions) - 1)
        state["submitted"] += 1
        return completion(
            tool_call("submit_proposals", {"proposals": submissions[index]}, "call_2")
        )

    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=create)
    return client


@pytest.fixture
def fake_oracle():
    """
    Factory for fake oracles answering with the given submissions.

    Usage:
        def test_extract(fake_oracle, make_proposal):
            client = fake_oracle([[make_proposal()]])
    """
    return build_fake_oracle


@pytest.fixture
def mock_embedding_client():
    """
    Mock AsyncOpenAI client for embedding generation.

    Returns:
        MagicMock: Client whose embeddings.create returns a 1536-float vector.
    """
    client = MagicMock()
    response = MagicMock()
    response.data = [MagicMock(embedding=[0.1] * 1536)]
    client.embeddings.create = AsyncMock(return_value=response)
    return client


@pytest.fixture
def sample_document_text():
    return SAMPLE_DOCUMENT


@pytest.fixture
def input_tree(tmp_path):
    """
    Create ``markdown/<committee>/<file>`` input documents.

    Returns:
        Path: The input root containing 國安局/提案.md and 國安局/說明.md
            (the latter has no proposals).
    """
    root = tmp_path / "markdown"
    committee = root / "國安局"
    committee.mkdir(parents=True)
    (committee / "提案.md").write_text(SAMPLE_DOCUMENT, encoding="utf-8")
    (committee / "說明.md").write_text("本文件僅為說明，沒有提案。\n", encoding="utf-8")
    (committee / "notes.pdf").write_bytes(b"%PDF")
    return root


@pytest.fixture
def pipeline_config(tmp_path, input_tree):
    """PipelineConfig with every path under the test's temporary directory."""
    return PipelineConfig(
        input_dir=str(input_tree),
        output_dir=str(tmp_path / "result"),
        checkpoint_path=str(tmp_path / "data" / "checkpoint.json"),
        consensus_mode="frequency_vote",
        attempts=3,
        document_concurrency=1,
        segment_concurrency=2,
        attempt_concurrency=3,
        extraction_retries=2,
        validation_retries=1,
        exclude_files=[],
    )
