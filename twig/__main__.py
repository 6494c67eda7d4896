"""Entry point for ``python -m twig``."""

from twig.cli import main

main()
