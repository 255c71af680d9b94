"""
Test suite for BudgetProposals.

This package contains the unit and integration tests for the extraction and
sync pipelines, organized by module to mirror the source code structure.

Test Organization:
    - test_utils/: Configuration, monitoring and the concurrency scheduler
    - test_processors/: Segmentation, extraction, consensus, validation, embeddings
    - test_ingestion/: Checkpoint, result files, extraction and sync pipelines
    - test_database/: Qdrant store and chunked uploads
    - test_cli/: Click commands

Python Learning Notes:
    - __init__.py makes this directory a Python package
    - Tests are discovered automatically by pytest
    - Test files should start with test_ prefix
    - Test functions should also start with test_
"""
