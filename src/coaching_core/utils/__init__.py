"""Shared utilities for the coaching booking core."""
