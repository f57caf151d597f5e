"""
Prow CLI module.

Command-line inspector for serialized ProwJob records. Reads records from
files or stdin, validates them through prow_common's codec and prints what
they describe.
"""

from .cli import cli

__all__ = ["cli"]
