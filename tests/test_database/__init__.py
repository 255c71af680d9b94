"""Tests for the Qdrant store and batch uploader."""
