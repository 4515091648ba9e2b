"""Allow ``python -m yt_resolve`` invocation.

Delegates to the CLI error-boundary entry point so that
``python -m yt_resolve`` behaves identically to the ``yt-resolve``
console script.
"""

from __future__ import annotations

from yt_resolve.cli.app import cli

if __name__ == "__main__":
    cli()
