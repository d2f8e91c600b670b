"""Command-line interface for bezierforge.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- Progress bars for chunked imports
- Anchor tables for decoded path data
- Quiet output mode
- Detailed error reporting
"""

from bezierforge.cli.app import cli, main

__all__ = ["cli", "main"]
