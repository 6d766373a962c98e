"""Packaged constant data for bodygraph."""
