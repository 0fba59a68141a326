"""Shared building blocks: errors, process runner, filesystem helpers."""
