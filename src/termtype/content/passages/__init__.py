"""Passage sets shipped as JSON resources."""
