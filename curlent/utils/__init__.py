"""Shared utilities for curlent."""
