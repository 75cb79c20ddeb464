"""Utility modules for todotree."""
