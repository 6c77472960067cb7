"""AIBVS operations console backend."""
