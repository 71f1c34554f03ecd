"""Bundled passage content."""
