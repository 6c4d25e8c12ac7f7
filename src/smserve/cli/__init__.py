"""Command line interface for smserve."""
