"""
kscope Command-Line Interface
=============================

This package provides the `kscope` command: it reads Kaleidoscope input
from a file or stdin, parses every top-level construct, reports syntax
errors and optionally prints the parsed AST.

The tool is implemented as a Click-based CLI application.
"""

__all__ = ["kscope"]
