"""Allow ``python -m nspass``."""

from nspass.cli import main

main()
