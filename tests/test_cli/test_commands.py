"""
Tests for the extract, sync, run and status commands.

The pipelines are patched where the commands import them, so these tests
check option handling, summaries and exit codes without running extraction.

Python Learning Notes:
    - Commands import pipelines inside the function body, so patching the
      class on its defining module is enough
    - AsyncMock makes ``await pipeline.run()`` return the configured stats
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from budgetproposals.cli.main import main
from budgetproposals.errors import DirectoryReadFailure, UploadFailure

EXTRACTION_STATS = {
    "total_documents": 2,
    "documents_processed": 1,
    "documents_skipped": 1,
    "documents_failed": 0,
    "segments_processed": 2,
    "segments_empty": 0,
    "records_extracted": 2,
    "elapsed_time_formatted": "1.0s",
}

SYNC_STATS = {"records": 3, "without_vector": 1, "uploaded": 3}


@pytest.fixture
def cli_runner():
    return CliRunner()


def pipeline_mock(run_result=None, run_error=None):
    instance = MagicMock()
    instance.run = AsyncMock(return_value=run_result, side_effect=run_error)
    instance.close = AsyncMock()
    return MagicMock(return_value=instance), instance


class TestExtractCommand:
    """Tests for ``budgetproposals extract``."""

    def test_options_reach_config(self, cli_runner, tmp_path):
        pipeline_class, _ = pipeline_mock(EXTRACTION_STATS)

        with patch("budgetproposals.ingestion.pipeline.ExtractionPipeline", pipeline_class):
            result = cli_runner.invoke(
                main,
                [
                    "extract",
                    "--input-dir",
                    str(tmp_path),
                    "--attempts",
                    "5",
                    "--mode",
                    "single_attempt",
                    "--exclude",
                    "a.md",
                    "--exclude",
                    "b.md",
                ],
            )

        assert result.exit_code == 0, result.output
        config = pipeline_class.call_args.args[0]
        assert config.input_dir == str(tmp_path)
        assert config.attempts == 5
        assert config.consensus_mode == "single_attempt"
        assert config.exclude_files == ["a.md", "b.md"]
        assert pipeline_class.call_args.kwargs == {"show_progress": True}
        assert "EXTRACTION COMPLETE" in result.output
        assert "Records Extracted: 2" in result.output

    def test_invalid_config_exits_with_error(self, cli_runner):
        pipeline_class, _ = pipeline_mock(EXTRACTION_STATS)

        with patch("budgetproposals.ingestion.pipeline.ExtractionPipeline", pipeline_class):
            result = cli_runner.invoke(main, ["extract", "--attempts", "0"])

        assert result.exit_code == 1
        assert "attempts must be at least 1" in result.output
        pipeline_class.assert_not_called()

    def test_invalid_mode_is_rejected_by_click(self, cli_runner):
        result = cli_runner.invoke(main, ["extract", "--mode", "majority"])

        assert result.exit_code == 2

    def test_unreadable_input_exits_with_error(self, cli_runner):
        pipeline_class, _ = pipeline_mock(
            run_error=DirectoryReadFailure("Cannot read input directory ./markdown")
        )

        with patch("budgetproposals.ingestion.pipeline.ExtractionPipeline", pipeline_class):
            result = cli_runner.invoke(main, ["extract"])

        assert result.exit_code == 1
        assert "Cannot read input directory" in result.output

    def test_keyboard_interrupt_exits_cleanly(self, cli_runner):
        pipeline_class, _ = pipeline_mock(EXTRACTION_STATS)

        with patch(
            "budgetproposals.ingestion.pipeline.ExtractionPipeline", pipeline_class
        ), patch("asyncio.run", side_effect=KeyboardInterrupt):
            result = cli_runner.invoke(main, ["extract"])

        assert result.exit_code == 0
        assert "Interrupted by user" in result.output


class TestSyncCommand:
    """Tests for ``budgetproposals sync``."""

    def test_sync_prints_summary_and_closes(self, cli_runner):
        pipeline_class, instance = pipeline_mock(SYNC_STATS)

        with patch("budgetproposals.ingestion.sync.SyncPipeline", pipeline_class):
            result = cli_runner.invoke(
                main, ["sync", "--batch-size", "50", "--collection", "test_proposals"]
            )

        assert result.exit_code == 0, result.output
        config = pipeline_class.call_args.args[0]
        assert config.upload_batch_size == 50
        assert config.collection_name == "test_proposals"
        assert "Uploaded: 3" in result.output
        assert "Without Vector: 1" in result.output
        instance.close.assert_awaited_once()

    def test_upload_failure_exits_with_error(self, cli_runner):
        pipeline_class, instance = pipeline_mock(
            run_error=UploadFailure("Chunk 2 failed after 4 attempts", chunk_index=1, attempts=4)
        )

        with patch("budgetproposals.ingestion.sync.SyncPipeline", pipeline_class):
            result = cli_runner.invoke(main, ["sync"])

        assert result.exit_code == 1
        assert "Chunk 2 failed" in result.output
        instance.close.assert_awaited_once()

    def test_unexpected_error_exits_with_error(self, cli_runner):
        pipeline_class, _ = pipeline_mock(run_error=RuntimeError("boom"))

        with patch("budgetproposals.ingestion.sync.SyncPipeline", pipeline_class):
            result = cli_runner.invoke(main, ["sync"])

        assert result.exit_code == 1
        assert "Unexpected error: boom" in result.output


class TestRunCommand:
    def test_extracts_then_syncs(self, cli_runner):
        extraction_class, _ = pipeline_mock(EXTRACTION_STATS)
        sync_class, sync_instance = pipeline_mock(SYNC_STATS)

        with patch(
            "budgetproposals.ingestion.pipeline.ExtractionPipeline", extraction_class
        ), patch("budgetproposals.ingestion.sync.SyncPipeline", sync_class):
            result = cli_runner.invoke(main, ["run"])

        assert result.exit_code == 0, result.output
        assert "EXTRACTION COMPLETE" in result.output
        assert "SYNC COMPLETE" in result.output
        sync_instance.close.assert_awaited_once()

    def test_extraction_failure_skips_sync(self, cli_runner):
        extraction_class, _ = pipeline_mock(run_error=DirectoryReadFailure("missing"))
        sync_class, _ = pipeline_mock(SYNC_STATS)

        with patch(
            "budgetproposals.ingestion.pipeline.ExtractionPipeline", extraction_class
        ), patch("budgetproposals.ingestion.sync.SyncPipeline", sync_class):
            result = cli_runner.invoke(main, ["run"])

        assert result.exit_code == 1
        sync_class.assert_not_called()


class TestStatusCommand:
    def test_status_reports_counts(self, cli_runner, tmp_path):
        checkpoint = tmp_path / "checkpoint.json"
        checkpoint.write_text(
            '{"processedFiles": ["國安局/提案.md", "國安局/說明.md"]}', encoding="utf-8"
        )
        (tmp_path / "result" / "國安局").mkdir(parents=True)
        (tmp_path / "result" / "國安局" / "提案.json").write_text("[]", encoding="utf-8")

        store = MagicMock()
        store.count = AsyncMock(return_value=1234)
        store.close = AsyncMock()

        with patch(
            "budgetproposals.database.store.ProposalStore.from_settings",
            return_value=store,
        ):
            result = cli_runner.invoke(
                main,
                [
                    "status",
                    "--checkpoint",
                    str(checkpoint),
                    "--output-dir",
                    str(tmp_path / "result"),
                ],
            )

        assert result.exit_code == 0, result.output
        assert "Processed Documents: 2" in result.output
        assert "Result Files:        1" in result.output
        assert "Stored Records:      1,234" in result.output
        store.close.assert_awaited_once()
