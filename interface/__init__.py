"""Outer surfaces: REST API and terminal CLI."""
