"""Configuration management for BudgetProposals.

This module provides access to API credentials and pipeline settings
through environment variables. It is the central configuration hub for
the extraction oracle, the embedding service and the Qdrant store.

Credentials are never hardcoded: they are read from the environment at
runtime (the CLI loads a ``.env`` file first) and a missing required
credential raises ValueError immediately.

Environment Variable Setup:
    Create a .env file in the project root with these variables:
    ```
    OPENAI_API_KEY=your_openai_api_key_here
    QDRANT_PATH=./data/qdrant/qdrant_db      # local storage, or
    QDRANT_URL=https://your-cluster.qdrant.io
    QDRANT_API_KEY=optional_api_key
    BUDGET_INPUT_DIR=./markdown
    BUDGET_OUTPUT_DIR=./result
    ```

Python Learning Notes:
    - os.getenv() safely reads environment variables without raising errors
    - dataclass field(default_factory=...) reads the environment at
      construction time rather than import time
    - __post_init__ validates the assembled settings
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

CONSENSUS_MODES = ("frequency_vote", "single_attempt")


def get_openai_api_key() -> str:
    """Get OpenAI API key from environment variables.

    The key is used for both the structured extraction calls (chat
    completions with tool use) and the embedding requests.

    Returns:
        str: The OpenAI API key.

    Raises:
        ValueError: If the OPENAI_API_KEY environment variable is not
            set or is empty.

    Example Usage:
        ```python
        from openai import AsyncOpenAI

        client = AsyncOpenAI(api_key=get_openai_api_key())
        ```
    """
    # Attempt to read the API key from environment variables
    key = os.getenv("OPENAI_API_KEY")

    # Check if the key was found and is not empty
    if not key:
        raise ValueError(
            "OPENAI_API_KEY not found in environment variables. "
            "Please set it in your .env file."
        )

    return key


def get_qdrant_settings() -> Dict[str, Any]:
    """Get Qdrant connection settings from environment variables.

    Qdrant can run embedded on local disk (QDRANT_PATH), as a server
    (QDRANT_HOST/QDRANT_PORT) or in the cloud (QDRANT_URL). When nothing is
    set, local storage under ./data/qdrant/qdrant_db is used.

    Returns:
        Dict[str, Any]: Keyword arguments for ProposalStore: ``db_path``,
            ``host``, ``port``, ``url`` and ``api_key`` (unused ones are None).
    """
    url = os.getenv("QDRANT_URL")
    host = os.getenv("QDRANT_HOST")
    port = os.getenv("QDRANT_PORT")
    path = os.getenv("QDRANT_PATH")

    if not (url or host or path):
        path = "./data/qdrant/qdrant_db"

    return {
        "db_path": path,
        "host": host,
        "port": int(port) if port else None,
        "url": url,
        "api_key": os.getenv("QDRANT_API_KEY"),
    }


def _env_list(name: str, default: str = "") -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class PipelineConfig:
    """
    Settings for the extraction and sync pipelines.

    Every field has a default that can be overridden with a ``BUDGET_*``
    environment variable or a constructor argument (the CLI passes its
    options as constructor arguments).

    Attributes:
        input_dir: Root directory with one sub-directory per committee.
        output_dir: Root directory for the per-document JSON results.
        checkpoint_path: JSON file listing fully processed documents.
        extraction_model: OpenAI chat model used as the extraction oracle.
        embedding_model: OpenAI embedding model.
        embedding_dimensions: Length of the embedding vectors.
        consensus_mode: "frequency_vote" or "single_attempt".
        attempts: Independent extraction attempts per segment (frequency vote).
        document_concurrency: Documents processed at the same time.
        segment_concurrency: Segments processed at the same time per document.
        attempt_concurrency: Extraction attempts in flight per segment.
        embedding_concurrency: Embedding requests in flight during sync.
        snapshot_interval: Completed segments between result snapshots.
        extraction_retries: Oracle calls allowed per extraction attempt.
        validation_retries: Re-submissions of a segment with rejected records.
        max_tool_rounds: Tool-call turns allowed in one oracle conversation.
        request_timeout: Timeout in seconds for one OpenAI request.
        upload_batch_size: Records per insert call.
        upload_max_retries: Retries per chunk before the upload fails.
        upload_retry_delay: Base delay in seconds between upload retries.
        collection_name: Qdrant collection receiving the records.
        file_suffixes: Input file extensions that are treated as documents.
        exclude_files: Input file names that are never processed.

    Example:
        >>> config = PipelineConfig(input_dir="./markdown", attempts=5)
    """

    # Filesystem layout
    input_dir: str = field(
        default_factory=lambda: os.getenv("BUDGET_INPUT_DIR", "./markdown")
    )
    output_dir: str = field(
        default_factory=lambda: os.getenv("BUDGET_OUTPUT_DIR", "./result")
    )
    checkpoint_path: str = field(
        default_factory=lambda: os.getenv(
            "BUDGET_CHECKPOINT_PATH", "./data/checkpoint.json"
        )
    )

    # Models
    extraction_model: str = field(
        default_factory=lambda: os.getenv("BUDGET_EXTRACTION_MODEL", "gpt-4o")
    )
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 1536

    # Consensus
    consensus_mode: str = field(
        default_factory=lambda: os.getenv("BUDGET_CONSENSUS_MODE", "frequency_vote")
    )
    attempts: int = field(
        default_factory=lambda: int(os.getenv("BUDGET_ATTEMPTS", "3"))
    )

    # Concurrency limits for each fan-out level
    document_concurrency: int = field(
        default_factory=lambda: int(os.getenv("BUDGET_DOCUMENT_CONCURRENCY", "1"))
    )
    segment_concurrency: int = field(
        default_factory=lambda: int(os.getenv("BUDGET_SEGMENT_CONCURRENCY", "3"))
    )
    attempt_concurrency: int = field(
        default_factory=lambda: int(os.getenv("BUDGET_ATTEMPT_CONCURRENCY", "3"))
    )
    embedding_concurrency: int = field(
        default_factory=lambda: int(os.getenv("BUDGET_EMBEDDING_CONCURRENCY", "5"))
    )

    # Durability
    snapshot_interval: int = 20

    # Retry budgets
    extraction_retries: int = field(
        default_factory=lambda: int(os.getenv("BUDGET_EXTRACTION_RETRIES", "5"))
    )
    validation_retries: int = field(
        default_factory=lambda: int(os.getenv("BUDGET_VALIDATION_RETRIES", "2"))
    )
    max_tool_rounds: int = 8
    request_timeout: float = 120.0

    # Upload
    upload_batch_size: int = 100
    upload_max_retries: int = field(
        default_factory=lambda: int(os.getenv("BUDGET_UPLOAD_MAX_RETRIES", "3"))
    )
    upload_retry_delay: float = 1.0
    collection_name: str = field(
        default_factory=lambda: os.getenv("BUDGET_COLLECTION", "budget_proposals")
    )

    # Document discovery
    file_suffixes: Tuple[str, ...] = (".md", ".txt")
    exclude_files: List[str] = field(
        default_factory=lambda: _env_list("BUDGET_EXCLUDE_FILES")
    )

    def validate(self) -> bool:
        """
        Validate the configuration settings.

        Returns:
            True if configuration is valid, raises ValueError otherwise.

        Raises:
            ValueError: If configuration parameters are invalid.
        """
        if self.consensus_mode not in CONSENSUS_MODES:
            raise ValueError(
                f"consensus_mode must be one of {CONSENSUS_MODES}, "
                f"got {self.consensus_mode!r}"
            )
        if self.attempts < 1:
            raise ValueError("attempts must be at least 1")

        for name in (
            "document_concurrency",
            "segment_concurrency",
            "attempt_concurrency",
            "embedding_concurrency",
            "snapshot_interval",
            "extraction_retries",
            "max_tool_rounds",
            "upload_batch_size",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

        if self.validation_retries < 0:
            raise ValueError("validation_retries must not be negative")
        if self.upload_max_retries < 0:
            raise ValueError("upload_max_retries must not be negative")
        if self.embedding_dimensions <= 0:
            raise ValueError("embedding_dimensions must be positive")

        return True

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary.

        Returns:
            Dictionary representation of the configuration.
        """
        return {
            "input_dir": self.input_dir,
            "output_dir": self.output_dir,
            "checkpoint_path": self.checkpoint_path,
            "extraction_model": self.extraction_model,
            "embedding_model": self.embedding_model,
            "consensus_mode": self.consensus_mode,
            "attempts": self.attempts,
            "document_concurrency": self.document_concurrency,
            "segment_concurrency": self.segment_concurrency,
            "attempt_concurrency": self.attempt_concurrency,
            "snapshot_interval": self.snapshot_interval,
            "upload_batch_size": self.upload_batch_size,
            "collection_name": self.collection_name,
        }

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.validate()
