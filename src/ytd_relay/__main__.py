"""Allow ``python -m ytd_relay`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m ytd_relay`` behaves identically to the ``ytd-relay``
console script.
"""

from __future__ import annotations

from ytd_relay.cli.app import cli

if __name__ == "__main__":
    cli()
