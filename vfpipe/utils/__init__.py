"""Shared utilities for vfpipe."""
