"""Rendering of scan results."""
