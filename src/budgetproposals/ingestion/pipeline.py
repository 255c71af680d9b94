"""
Extraction pipeline: committee documents to per-document result files.

The pipeline follows these steps:
    1. Discover documents under ``<input_dir>/<committee>/<file>``
    2. Filter out documents the checkpoint already lists
    3. For each pending document (up to ``document_concurrency`` at once):
       a. Split it into proposal segments
       b. Extract every segment (up to ``segment_concurrency`` at once) with
          consensus over repeated attempts and validation with re-submission
       c. Snapshot the accumulated records every ``snapshot_interval``
          completed segments, and once more at the end
       d. Mark the document processed in the checkpoint
    4. Report statistics through the PerformanceMonitor

Failures are contained at the smallest unit that can absorb them: a failed
attempt becomes an empty attempt, a failed segment contributes no records,
and a failed document is left out of the checkpoint so the next run picks
it up again. Only an unreadable input directory stops the run.

Python Learning Notes:
    - ``nonlocal`` lets a nested callback update a variable of its enclosing
      function
    - async for drives the scheduler's async generator to completion
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..errors import DirectoryReadFailure, SegmentationEmpty, ValidationFailure
from ..processors.consensus import ConsensusMode, ConsensusResolver
from ..processors.extraction import ExtractionClient
from ..processors.schema import CandidateRecord, ProposalRecord
from ..processors.segmenter import Segment, segment_document
from ..processors.validation import ValidationGate
from ..utils import get_logger
from ..utils.config import PipelineConfig
from ..utils.monitoring import PerformanceMonitor
from ..utils.scheduler import ConcurrencyScheduler, TaskOutcome
from .checkpoint import CheckpointStore, ResultWriter

logger = get_logger(__name__)


@dataclass(frozen=True)
class DocumentRef:
    """
    One input document.

    Attributes:
        committee: Name of the committee directory
        filename: File name within the committee directory
        path: Full path to the file
    """

    committee: str
    filename: str
    path: Path

    @property
    def document_id(self) -> str:
        return f"{self.committee}/{self.filename}"


@dataclass
class DocumentResult:
    document_id: str
    segments: int
    records: int
    skipped: bool = False
    processing_time_ms: float = 0.0


def discover_documents(
    input_dir: str,
    suffixes: Sequence[str] = (".md", ".txt"),
    exclude: Iterable[str] = (),
) -> List[DocumentRef]:
    """
    List input documents, one sub-directory per committee.

    Result files are named after the file stem, so when two files in a
    committee share a stem only the first in name order is listed; the
    other is logged and skipped.

    Args:
        input_dir: Root input directory.
        suffixes: File extensions treated as documents.
        exclude: File names that are never processed.

    Returns:
        List[DocumentRef]: Sorted by committee, then file name.

    Raises:
        DirectoryReadFailure: If the root or a committee directory cannot
            be listed.
    """
    root = Path(input_dir)
    excluded = set(exclude)
    suffixes = tuple(suffix.lower() for suffix in suffixes)

    try:
        committees = sorted(path for path in root.iterdir() if path.is_dir())
        documents = []
        for committee_dir in committees:
            stems = {}
            for path in sorted(committee_dir.iterdir()):
                if not path.is_file() or path.suffix.lower() not in suffixes:
                    continue
                if path.name in excluded:
                    logger.info("Excluding %s/%s", committee_dir.name, path.name)
                    continue
                if path.stem in stems:
                    logger.error(
                        "Skipping %s/%s: result file %s.json already belongs to %s",
                        committee_dir.name,
                        path.name,
                        path.stem,
                        stems[path.stem],
                    )
                    continue
                stems[path.stem] = path.name
                documents.append(
                    DocumentRef(committee=committee_dir.name, filename=path.name, path=path)
                )
    except OSError as e:
        raise DirectoryReadFailure(f"Cannot read input directory {root}: {e}") from e

    return documents


class SegmentProcessor:
    """
    Extracts and validates one segment, re-submitting on rejection.

    When a round produces rejected records, the segment is extracted again
    with the rejection reasons of every round so far in the prompt, up to
    ``validation_retries`` more times. After the last round the rejected
    records are dropped and logged. The round with the most accepted
    records wins, so a retry that comes back empty never discards records
    an earlier round accepted.

    Attributes:
        resolver (ConsensusResolver): Produces candidate records
        gate (ValidationGate): Accepts or rejects candidates
        validation_retries (int): Re-submissions allowed per segment
    """

    def __init__(
        self,
        resolver: ConsensusResolver,
        gate: Optional[ValidationGate] = None,
        validation_retries: int = 2,
    ):
        self.resolver = resolver
        self.gate = gate or ValidationGate()
        self.validation_retries = validation_retries

    async def process(self, segment: Segment, committee: str) -> List[ProposalRecord]:
        error_context: Optional[str] = None
        reasons: List[str] = []
        best: List[CandidateRecord] = []

        for round_number in range(self.validation_retries + 1):
            candidates = await self.resolver.resolve(segment.text, error_context)
            accepted, rejected = self.gate.partition(candidates)
            if len(accepted) >= len(best):
                best = accepted
            if not rejected:
                break

            if round_number == self.validation_retries:
                for record, reason in rejected:
                    failure = ValidationFailure(reason, segment_index=segment.index)
                    logger.error(
                        "Dropping record of %s segment %d (「%s」): %s",
                        segment.document_id,
                        segment.index,
                        record.content[:30],
                        failure,
                    )
                break

            logger.warning(
                "%s segment %d: %d record(s) rejected, re-submitting (%d/%d)",
                segment.document_id,
                segment.index,
                len(rejected),
                round_number + 1,
                self.validation_retries,
            )
            reasons.extend(f"- {reason}" for _, reason in rejected)
            error_context = "\n".join(reasons)

        return [ProposalRecord.from_candidate(record, committee) for record in best]


class ExtractionPipeline:
    """
    Runs extraction over every pending document.

    Attributes:
        config (PipelineConfig): Pipeline settings
        checkpoint (CheckpointStore): Processed-document set
        writer (ResultWriter): Result file writer
        monitor (PerformanceMonitor): Run statistics and progress
        segment_processor (SegmentProcessor): Per-segment extraction

    Example:
        pipeline = ExtractionPipeline(PipelineConfig(input_dir="./markdown"))
        stats = await pipeline.run()
        print(stats["records_extracted"])
    """

    def __init__(
        self,
        config: PipelineConfig,
        client: Optional[ExtractionClient] = None,
        checkpoint: Optional[CheckpointStore] = None,
        writer: Optional[ResultWriter] = None,
        monitor: Optional[PerformanceMonitor] = None,
        show_progress: bool = False,
    ):
        self.config = config
        client = client or ExtractionClient(
            model=config.extraction_model,
            max_retries=config.extraction_retries,
            max_tool_rounds=config.max_tool_rounds,
            timeout=config.request_timeout,
        )
        resolver = ConsensusResolver(
            client,
            mode=ConsensusMode(config.consensus_mode),
            attempts=config.attempts,
            concurrency=config.attempt_concurrency,
        )
        self.segment_processor = SegmentProcessor(
            resolver, ValidationGate(), config.validation_retries
        )
        self.checkpoint = checkpoint or CheckpointStore(config.checkpoint_path)
        self.writer = writer or ResultWriter(config.output_dir)
        self.monitor = monitor or PerformanceMonitor()
        self.show_progress = show_progress

    async def run(self) -> Dict[str, Any]:
        """
        Execute the extraction run.

        Returns:
            Dict[str, Any]: PerformanceMonitor statistics for the run.

        Raises:
            DirectoryReadFailure: If the input directory cannot be listed.
        """
        documents = discover_documents(
            self.config.input_dir, self.config.file_suffixes, self.config.exclude_files
        )
        self.checkpoint.load()

        pending = [
            document
            for document in documents
            if not self.checkpoint.is_processed(document.document_id)
        ]
        logger.info(
            "Found %d documents, %d already processed, %d pending",
            len(documents),
            len(documents) - len(pending),
            len(pending),
        )

        self.monitor.start(total_documents=len(pending))
        if not pending:
            logger.info("All documents have already been processed")
            return self.monitor.get_statistics()

        scheduler = ConcurrencyScheduler(
            self.config.document_concurrency, on_complete=self._on_document_complete
        )
        async for _ in scheduler.imap(pending, self.process_document):
            pass

        return self.monitor.get_statistics()

    def _on_document_complete(self, outcome: TaskOutcome) -> None:
        document = outcome.item
        if not outcome.ok:
            logger.error("Failed to process %s: %s", document.document_id, outcome.error)
            self.monitor.record_document(failed=True)
        else:
            result = outcome.value
            self.monitor.record_document(
                result.processing_time_ms, skipped=result.skipped
            )
            logger.info(
                "Finished %s: %d segments, %d records",
                document.document_id,
                result.segments,
                result.records,
            )

        logger.info("Overall progress: %.1f%%", self.monitor.completion_percentage)
        if self.show_progress:
            self.monitor.print_progress(
                self.monitor.total_processed, self.monitor.total_documents, "Documents"
            )

    async def process_document(self, document: DocumentRef) -> DocumentResult:
        """
        Extract one document, snapshot its records and checkpoint it.

        Args:
            document: Document to process.

        Returns:
            DocumentResult: Segment and record counts for the document.
        """
        started = time.time()
        text = document.path.read_text(encoding="utf-8")
        segments = segment_document(document.document_id, text)

        if not segments:
            logger.warning("%s", SegmentationEmpty(document.document_id))
            self.checkpoint.mark_processed(document.document_id)
            return DocumentResult(document.document_id, 0, 0, skipped=True)

        records: List[ProposalRecord] = []
        completed = 0
        total = len(segments)
        interval = self.config.snapshot_interval

        def on_segment(outcome: TaskOutcome) -> None:
            nonlocal completed
            completed += 1
            if outcome.ok:
                records.extend(outcome.value)
                self.monitor.record_segment(len(outcome.value))
            else:
                logger.error(
                    "%s segment %d failed: %s",
                    document.document_id,
                    outcome.index,
                    outcome.error,
                )
                self.monitor.record_segment(0)

            logger.info("[%s] %d/%d", document.filename, completed, total)
            if completed % interval == 0 and completed < total:
                self.writer.write(document.committee, document.filename, records)

        scheduler = ConcurrencyScheduler(
            self.config.segment_concurrency, on_complete=on_segment
        )
        async for _ in scheduler.imap(
            segments,
            lambda segment: self.segment_processor.process(segment, document.committee),
        ):
            pass

        self.writer.write(document.committee, document.filename, records)
        self.checkpoint.mark_processed(document.document_id)

        return DocumentResult(
            document_id=document.document_id,
            segments=total,
            records=len(records),
            processing_time_ms=(time.time() - started) * 1000,
        )
