"""Run a contact enrichment batch with ``python -m contact_enricher``.

Arguments are handed to :func:`contact_enricher.cli.main` unchanged. Without
any arguments the usage text is printed and the exit status is 2, the same
status argparse uses for a usage error.
"""
from __future__ import annotations

import sys

from . import cli

PROG = "python -m contact_enricher"


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    if args:
        return cli.main(args)

    cli.build_parser(prog=PROG).print_help()
    return 2


if __name__ == "__main__":  # pragma: no cover - module entry point
    sys.exit(main())
