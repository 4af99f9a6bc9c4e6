# File: yogen/__main__.py
"""
yogen - Module entry point.

Allows running the generator directly via::

    python -m yogen generate schema.sql --from-ddl -o models

This module simply delegates to the CLI entry point defined in ``yogen.cli``.
"""

from __future__ import annotations


def main() -> None:
    """Delegate to the CLI main function."""
    from yogen.cli import cli_main
    cli_main()


if __name__ == "__main__":
    main()
