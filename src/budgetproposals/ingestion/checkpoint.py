"""
Resumable progress and durable result snapshots.

Two small file-backed stores make the extraction pipeline safe to stop and
restart:

    - CheckpointStore records which documents are fully processed in a JSON
      file ``{"lastUpdated": ISO-8601, "processedFiles": ["committee/file"]}``.
      A document is marked only after its records have been written, so a
      crash can cause a document to be processed twice but never skipped.
    - ResultWriter overwrites ``<output>/<committee>/<stem>.json`` with the
      records accumulated so far. Snapshots are never appended to, so a
      re-run replaces the previous output of a document.

Both write through a temporary file and ``os.replace`` so readers never see
a half-written file.

Python Learning Notes:
    - os.replace() is an atomic rename on the same filesystem
    - json.dump(ensure_ascii=False) keeps Chinese text readable in the file
    - A set gives O(1) membership tests for processed documents
"""

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, List, Set, Union

from ..processors.schema import ProposalRecord, sort_records
from ..utils import get_logger

logger = get_logger(__name__)


def write_json_atomic(path: Path, data: Any) -> None:
    """
    Write JSON to ``path`` via a temporary file in the same directory.

    Args:
        path: Destination file. Parent directories are created.
        data: JSON-serializable value.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


class CheckpointStore:
    """
    Set of fully processed document ids persisted as JSON.

    The set only grows during a run. Writes happen inside a single
    synchronous step of the event loop, so no locking is needed as long as
    no other process writes the same file.

    Attributes:
        path (Path): Location of the checkpoint file

    Example:
        checkpoint = CheckpointStore("./data/checkpoint.json")
        checkpoint.load()

        if not checkpoint.is_processed("內政部/提案.md"):
            ...
            checkpoint.mark_processed("內政部/提案.md")
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._processed: Set[str] = set()
        self._order: List[str] = []

    def load(self) -> "CheckpointStore":
        """
        Read the checkpoint file if it exists.

        A missing file means nothing has been processed. An unreadable file
        is logged and treated the same way; re-processing a document only
        overwrites its result file.
        """
        self._processed = set()
        self._order = []

        if not self.path.exists():
            logger.info("No checkpoint at %s, starting fresh", self.path)
            return self

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            files = data.get("processedFiles", [])
            if not isinstance(files, list) or not all(
                isinstance(name, str) for name in files
            ):
                raise ValueError("processedFiles must be a list of document ids")
        except (OSError, ValueError, AttributeError) as e:
            logger.error("Could not read checkpoint %s: %s", self.path, e)
            return self

        for document_id in files:
            if document_id not in self._processed:
                self._processed.add(document_id)
                self._order.append(document_id)

        logger.info(
            "Loaded checkpoint with %d processed documents", len(self._processed)
        )
        return self

    def is_processed(self, document_id: str) -> bool:
        return document_id in self._processed

    def mark_processed(self, document_id: str) -> None:
        """Add a document to the set and persist the checkpoint."""
        if document_id in self._processed:
            return
        self._processed.add(document_id)
        self._order.append(document_id)
        self.save()

    def save(self) -> None:
        write_json_atomic(
            self.path,
            {
                "lastUpdated": datetime.now(timezone.utc).isoformat(),
                "processedFiles": list(self._order),
            },
        )

    @property
    def processed(self) -> int:
        """Number of processed documents."""
        return len(self._processed)

    @property
    def processed_files(self) -> List[str]:
        return list(self._order)


class ResultWriter:
    """
    Writes per-document result files.

    Attributes:
        output_dir (Path): Root of the result tree
    """

    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)

    def result_path(self, committee: str, filename: str) -> Path:
        """``<output>/<committee>/<stem>.json`` for a source document."""
        return self.output_dir / committee / f"{Path(filename).stem}.json"

    def write(
        self, committee: str, filename: str, records: Iterable[ProposalRecord]
    ) -> Path:
        """
        Overwrite the result file with the given records.

        Records are sorted by category, then content, before writing.

        Returns:
            Path: The file that was written.
        """
        path = self.result_path(committee, filename)
        rows = [record.model_dump(mode="json") for record in sort_records(records)]
        write_json_atomic(path, rows)
        logger.debug("Wrote %d records to %s", len(rows), path)
        return path

    def read(self, path: Union[str, Path]) -> List[ProposalRecord]:
        """Load a result file back into ProposalRecords."""
        with open(path, "r", encoding="utf-8") as f:
            rows = json.load(f)
        return [ProposalRecord.model_validate(row) for row in rows]

    def result_files(self) -> List[Path]:
        """All result files under the output root, in a stable order."""
        if not self.output_dir.exists():
            return []
        return sorted(self.output_dir.glob("*/*.json"))
