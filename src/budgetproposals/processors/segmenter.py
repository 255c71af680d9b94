"""
Proposal segmentation for committee budget documents.

A committee document is a flat text file containing a preamble followed by
top-level proposals. Each top-level proposal starts on a new line with a
parenthesized Chinese ordinal such as ``(一)`` or ``（十二）``. Some
documents also contain ``第N項`` / ``第N款`` item headers between proposals.

This module splits a document into one segment per top-level proposal and
normalizes each segment so the extraction oracle receives single-line body
text with the proposer list, co-signer list and numbered sub-items visually
separated:

    (一)為加強國安管理，建議將相關預算凍結50萬元。
    <blank line>
    提案人：王小明
    <blank line>
    連署人：李大華、張三

Sub-items (``1.``, ``2.``) stay inside their parent segment; the oracle
decides how to read them.
"""

import re
from dataclasses import dataclass
from typing import List

from ..utils import get_logger

logger = get_logger(__name__)

_ORDINAL = r"[(（][一二三四五六七八九十百千○零]+[)）]"

# A new top-level block starts at a line that opens with a parenthesized
# ordinal or an explicit item/clause marker
BLOCK_BOUNDARY_PATTERN = re.compile(
    rf"\n(?=[ \t　]*(?:{_ORDINAL}|第[0-9０-９]+[項款]))"
)

# Only blocks that themselves start with a parenthesized ordinal are proposals
PROPOSAL_START_PATTERN = re.compile(rf"^{_ORDINAL}")

LEADING_ORDINAL_PATTERN = re.compile(rf"^\s*{_ORDINAL}\s*")

# Digits followed by a period, excluding decimals such as 1.5
SUB_ITEM_PATTERN = re.compile(r"(?<![\d.])(\d+)\.(?!\d)")

FULL_WIDTH_SPACE = "　"
PARAGRAPH_LABELS = ("提案人：", "連署人：")


@dataclass(frozen=True)
class Segment:
    """
    One top-level proposal of a document.

    Attributes:
        document_id: ``committee/filename`` of the source document
        index: Zero-based position of the segment within the document
        text: Normalized proposal text sent to the oracle
    """

    document_id: str
    index: int
    text: str


def normalize_segment(chunk: str) -> str:
    """
    Flatten a proposal block and re-insert its paragraph breaks.

    Args:
        chunk: Raw proposal block starting with its ordinal marker.

    Returns:
        str: Block with newlines collapsed to full-width spaces and blank
            lines inserted before ``提案人：``, ``連署人：`` and numbered
            sub-items.
    """
    text = chunk.strip().replace("\n", FULL_WIDTH_SPACE)
    for label in PARAGRAPH_LABELS:
        text = text.replace(label, f"\n\n{label}")
    return SUB_ITEM_PATTERN.sub(r"\n\n\1.", text)


def split_proposals(text: str) -> List[str]:
    """
    Split a document into normalized proposal segments.

    Blocks that do not start with a parenthesized ordinal (the preamble,
    ``第N項`` headers and anything else between proposals) are dropped.

    Args:
        text: Full document text.

    Returns:
        List[str]: Normalized segment texts in document order. Empty when
            the document contains no proposals.

    Example:
        >>> split_proposals("說明\\n(一)刪減100萬元。\\n(二)凍結50萬元。")
        ['(一)刪減100萬元。', '(二)凍結50萬元。']
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    blocks = BLOCK_BOUNDARY_PATTERN.split(text)

    segments = []
    for block in blocks:
        block = block.strip(" \t\n" + FULL_WIDTH_SPACE)
        if not block or not PROPOSAL_START_PATTERN.match(block):
            continue
        segments.append(normalize_segment(block))

    return segments


def segment_document(document_id: str, text: str) -> List[Segment]:
    """
    Split a document into indexed Segment objects.

    Args:
        document_id: ``committee/filename`` of the document.
        text: Full document text.

    Returns:
        List[Segment]: One segment per top-level proposal, in order.
    """
    segments = [
        Segment(document_id=document_id, index=index, text=segment_text)
        for index, segment_text in enumerate(split_proposals(text))
    ]
    logger.debug("Split %s into %d segments", document_id, len(segments))
    return segments


def strip_leading_ordinal(content: str) -> str:
    """Remove a leading ``(一)`` style marker from proposal content."""
    return LEADING_ORDINAL_PATTERN.sub("", content, count=1)
