"""Module entrypoint for ``python -m payload_schema``."""

from __future__ import annotations

from payload_schema.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
