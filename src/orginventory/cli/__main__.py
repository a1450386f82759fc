"""Module entrypoint to support ``python -m orginventory.cli`` invocation."""

from __future__ import annotations

from orginventory.cli.app import run


def main() -> None:
    run()


if __name__ == "__main__":
    main()
