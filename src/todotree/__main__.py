"""Allow running todotree with ``python -m todotree``."""

from todotree.cli import main

if __name__ == "__main__":
	main()
