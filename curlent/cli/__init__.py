"""Command-line interface for curlent."""
