"""CLI layer — argument parsing, user interaction, and error boundary.

This package is the outermost layer of the application.  It wires the
``infra`` adapters into the ``core`` services; no other layer may import
from ``cli``.
"""
