"""todotree - TODO annotations grouped by the commit that introduced them."""

__version__ = "0.1.0"
