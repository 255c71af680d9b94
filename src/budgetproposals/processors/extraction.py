"""
Structured proposal extraction using OpenAI tool calls.

This module sends one proposal segment to an OpenAI chat model and returns
the candidate records it submits. The model works through two function
tools:

    - ``calculate``: a small arithmetic tool executed locally. Amounts in
      the documents are written in 萬元/千元/億, and the model must convert
      them to 元 with this tool instead of doing the arithmetic itself.
    - ``submit_proposals``: a strict JSON-schema tool carrying the final
      ``{"proposals": [...]}`` payload.

``tool_choice="required"`` forces a tool call on every turn, so a
conversation is a sequence of calculate rounds ending in one submission.

The module focuses on:
    - Retrying transport failures (rate limits, timeouts, 5xx) with
      exponential backoff
    - Retrying schema failures with the diagnostic fed back to the model
    - Never raising to callers: an exhausted attempt returns ``[]``

Python Learning Notes:
    - AsyncOpenAI mirrors the sync client but every request is awaited
    - json.loads() raises JSONDecodeError (a ValueError) on malformed JSON
    - pydantic raises ValidationError when the payload has the wrong shape
"""

import asyncio
import json
import re
from typing import Any, Dict, List, Optional

from openai import (APIConnectionError, APIError, APIStatusError, AsyncOpenAI,
                    RateLimitError)
from pydantic import ValidationError

from ..errors import ExtractionFailure
from ..utils import get_logger
from ..utils.config import get_openai_api_key
from .schema import CandidateRecord, proposal_json_schema
from .segmenter import strip_leading_ordinal
from .taxonomy import describe_taxonomy

logger = get_logger(__name__)

CALCULATE_TOOL_NAME = "calculate"
SUBMIT_TOOL_NAME = "submit_proposals"

# Unit words that mean the model has to convert amounts before submitting
UNIT_PATTERN = re.compile(r"萬|億|千元")

CALCULATE_TOOL: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": CALCULATE_TOOL_NAME,
        "description": "執行四則運算，用於將萬元、千元、億元等金額換算為元。",
        "parameters": {
            "type": "object",
            "properties": {
                "operation": {
                    "type": "string",
                    "enum": ["add", "subtract", "multiply", "divide"],
                },
                "a": {"type": "number"},
                "b": {"type": "number"},
            },
            "required": ["operation", "a", "b"],
            "additionalProperties": False,
        },
        "strict": True,
    },
}

SUBMIT_TOOL: Dict[str, Any] = {
    "type": "function",
    "function": {
        "name": SUBMIT_TOOL_NAME,
        "description": "提交解析完成的提案清單。每個提案一筆紀錄。",
        "parameters": proposal_json_schema(),
        "strict": True,
    },
}

SYSTEM_PROMPT = """你是立法院預算提案的資料整理助理。
你會收到一段提案文字，請把其中的每一個提案轉換為結構化資料，並呼叫 submit_proposals 工具提交。
所有金額換算都必須呼叫 calculate 工具完成，不要自行心算。"""


def calculate(operation: str, a: float, b: float) -> float:
    """
    Evaluate one arithmetic operation for the ``calculate`` tool.

    Args:
        operation: One of add, subtract, multiply, divide.
        a: Left operand.
        b: Right operand.

    Returns:
        float: The result; integral results are returned as int.

    Raises:
        ValueError: On an unknown operation or division by zero.
    """
    if operation == "add":
        result = a + b
    elif operation == "subtract":
        result = a - b
    elif operation == "multiply":
        result = a * b
    elif operation == "divide":
        if b == 0:
            raise ValueError("division by zero")
        result = a / b
    else:
        raise ValueError(f"unknown operation: {operation}")

    if isinstance(result, float) and result.is_integer():
        return int(result)
    return result


def build_extraction_prompt(segment_text: str, error_context: Optional[str] = None) -> str:
    """
    Build the user prompt for one segment.

    Args:
        segment_text: Normalized proposal segment.
        error_context: Rejection reasons from a previous validation round,
            if the segment is being re-submitted.

    Returns:
        str: Prompt listing the taxonomy, field rules and the segment.
    """
    prompt = f"""請根據以下分類，將提案轉換為結構化資料：

分類（冒號後為該分類涵蓋的機關，供判斷參考）：
{describe_taxonomy()}

請根據提案內容解析：
- 分類 (category)：判斷該提案應屬於哪個分類，只能使用上方冒號前的分類名稱
- 提案內容 (content)：
  - 完整保留提案敘述，不要更改任何文字
  - 必填
  - 處理時請移除提案開頭編號，例如 (一)
- 行動 (action)：
  - 若提案要求照列預算，選擇 "照列"
  - 若提案要求刪減預算，選擇 "減列"
  - 若提案要求凍結預算，選擇 "凍結"
  - 若提案同時要求刪減與凍結，選擇 "減列與凍結"
  - 若提案要求增列預算，選擇 "增列"
  - 若提案為流程改善、政策建議等，選擇 "其他建議"
- 提案人 (proposer)：提案人姓名清單
- 連署人 (co_signers)：連署人姓名清單，若無則為 null
- 預算金額 (cost)：原始編列的預算金額，若提案未提及，填寫 null
- 凍結金額 (frozen)：若無凍結要求，填寫 null
- 減列金額 (deleted)：若無刪減要求，填寫 null
- 增列金額 (added)：若無增列要求，填寫 null
- 其他備註 (remarks)：若有額外資訊可補充，否則填寫 null

金額規則：
- 金額單位一律轉換為元，例如 1000萬 轉換為 10000000
- 萬元乘以 10000，千元乘以 1000，億元乘以 100000000
- 單位大部分是「萬元」，不是「千元」
- 換算時必須呼叫 calculate 工具

結構規則：
- 母提案會以括號開頭，像是 (一)
- 子提案會以數字開頭，像是 1.
- 可能會夾雜其他文字，如果看起來不像提案可以跳過

<提案>
{segment_text}
</提案>
"""
    if error_context:
        prompt += f"""
上一次的解析結果未通過檢查，請修正以下問題：
{error_context}
"""
    return prompt


def build_retry_prompt(attempt_number: int, last_error: str) -> str:
    """
    Build the feedback message for a retry after a schema failure.

    Args:
        attempt_number: 1-based number of the attempt that failed.
        last_error: Diagnostic describing why the submission was rejected.

    Returns:
        str: Message appended to the next conversation.
    """
    return (
        f"第 {attempt_number} 次提交未通過格式檢查：{last_error}\n"
        "請修正上述問題後重新呼叫 submit_proposals。"
        "所有金額請先以 calculate 工具換算為元，沒有的金額請填寫 null。"
    )


def is_retryable_error(error: APIError) -> bool:
    """Rate limits, connection problems, timeouts and 5xx responses are transient."""
    if isinstance(error, (RateLimitError, APIConnectionError)):
        return True
    return isinstance(error, APIStatusError) and error.status_code >= 500


def parse_submission(arguments: str) -> List[CandidateRecord]:
    """
    Parse the ``submit_proposals`` arguments into candidate records.

    Raises:
        json.JSONDecodeError: If the arguments are not valid JSON.
        ValidationError: If a record has the wrong shape or types.
        ExtractionFailure: If the ``proposals`` array is missing.
    """
    payload = json.loads(arguments)
    if not isinstance(payload, dict) or not isinstance(payload.get("proposals"), list):
        raise ExtractionFailure("submit_proposals 缺少 proposals 陣列")
    return [CandidateRecord.model_validate(item) for item in payload["proposals"]]


class ExtractionClient:
    """
    Calls the extraction oracle for one segment.

    Each call to ``extract`` is one extraction attempt. Inside an attempt,
    up to ``max_retries`` oracle conversations are made: transport failures
    back off exponentially, schema failures are retried immediately with
    feedback. When the budget is spent the attempt yields ``[]``.

    Attributes:
        client (AsyncOpenAI): OpenAI client (SDK retries disabled)
        model (str): Chat model name
        max_retries (int): Conversations allowed per attempt
        max_tool_rounds (int): Tool-call turns allowed per conversation
        base_delay (float): Backoff unit in seconds for transport retries

    Example:
        client = ExtractionClient(model="gpt-4o")
        records = await client.extract(segment.text)
    """

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: str = "gpt-4o",
        max_retries: int = 5,
        max_tool_rounds: int = 8,
        timeout: float = 120.0,
        base_delay: float = 1.0,
        api_key: Optional[str] = None,
    ):
        self.client = client or AsyncOpenAI(
            api_key=api_key or get_openai_api_key(), timeout=timeout, max_retries=0
        )
        self.model = model
        self.max_retries = max_retries
        self.max_tool_rounds = max_tool_rounds
        self.base_delay = base_delay

    async def extract(
        self, segment_text: str, error_context: Optional[str] = None
    ) -> List[CandidateRecord]:
        """
        Run one extraction attempt for a segment.

        Args:
            segment_text: Normalized proposal segment.
            error_context: Rejection reasons from a previous validation
                round, included in the prompt when present.

        Returns:
            List[CandidateRecord]: Submitted records with leading ordinals
                removed from ``content``; ``[]`` when every retry failed or
                the client raised an unexpected error.
        """
        prompt = build_extraction_prompt(segment_text, error_context)
        last_error: Optional[str] = None

        for attempt in range(self.max_retries):
            messages: List[Dict[str, Any]] = [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ]
            if last_error:
                messages.append(
                    {"role": "user", "content": build_retry_prompt(attempt, last_error)}
                )

            try:
                records = await self._converse(segment_text, messages)
                return [
                    record.model_copy(
                        update={"content": strip_leading_ordinal(record.content)}
                    )
                    for record in records
                ]
            except APIError as e:
                if not is_retryable_error(e):
                    logger.error("Non-retryable API error during extraction: %s", e)
                    return []
                if attempt < self.max_retries - 1:
                    wait_time = self.base_delay * 2**attempt
                    logger.warning(
                        "Transient API error on attempt %d/%d, waiting %.1fs: %s",
                        attempt + 1,
                        self.max_retries,
                        wait_time,
                        e,
                    )
                    await asyncio.sleep(wait_time)
                last_error = None
            except (ExtractionFailure, ValidationError, ValueError) as e:
                # JSONDecodeError is a ValueError
                last_error = str(e)
                logger.warning(
                    "Schema failure on attempt %d/%d: %s",
                    attempt + 1,
                    self.max_retries,
                    last_error,
                )
            except Exception as e:
                logger.error("Unexpected error during extraction: %s", e)
                return []

        logger.error("Extraction failed after %d attempts", self.max_retries)
        return []

    async def _converse(
        self, segment_text: str, messages: List[Dict[str, Any]]
    ) -> List[CandidateRecord]:
        """Drive one tool-call conversation until a submission arrives."""
        calculated = False

        for _ in range(self.max_tool_rounds):
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=list(messages),
                tools=[CALCULATE_TOOL, SUBMIT_TOOL],
                tool_choice="required",
            )
            message = response.choices[0].message
            tool_calls = message.tool_calls or []
            if not tool_calls:
                raise ExtractionFailure("模型沒有呼叫任何工具")

            messages.append(
                {
                    "role": "assistant",
                    "content": message.content,
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {
                                "name": call.function.name,
                                "arguments": call.function.arguments,
                            },
                        }
                        for call in tool_calls
                    ],
                }
            )

            submission = None
            for call in tool_calls:
                if call.function.name == SUBMIT_TOOL_NAME:
                    submission = submission or call
                    continue
                if call.function.name == CALCULATE_TOOL_NAME:
                    calculated = True
                    content = self._run_calculate(call.function.arguments)
                else:
                    content = json.dumps({"error": f"unknown tool {call.function.name}"})
                messages.append(
                    {"role": "tool", "tool_call_id": call.id, "content": content}
                )

            if submission is not None:
                records = parse_submission(submission.function.arguments)
                if (
                    not calculated
                    and UNIT_PATTERN.search(segment_text)
                    and any(
                        value is not None
                        for record in records
                        for value in record.amounts().values()
                    )
                ):
                    raise ExtractionFailure("金額含有單位換算，但未呼叫 calculate 工具")
                return records

        raise ExtractionFailure(
            f"超過 {self.max_tool_rounds} 回合仍未呼叫 submit_proposals"
        )

    @staticmethod
    def _run_calculate(arguments: str) -> str:
        try:
            args = json.loads(arguments)
            result = calculate(args["operation"], args["a"], args["b"])
        except (ValueError, KeyError, TypeError) as e:
            return json.dumps({"error": str(e)})
        return json.dumps({"result": result})
