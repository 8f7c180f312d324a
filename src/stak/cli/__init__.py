"""
Stak Command-Line Interface
===========================

This package provides the ``stak`` command, which runs a source file or
an expression, or starts an interactive REPL when given neither.

The command is a Click application; exit codes and error formatting are
shared through stak.cli.errors.
"""

__all__ = ["stak"]
