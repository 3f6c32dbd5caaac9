"""Allow ``python -m nspass.cli``."""

from nspass.cli import main

main()
