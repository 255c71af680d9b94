"""
Tests for the ingestion pipelines.

This package contains tests for the ingestion module including:
- Checkpoint store and result files
- Extraction pipeline with validation re-submission
- Sync pipeline into the proposal store
"""
