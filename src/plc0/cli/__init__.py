"""
plc0 Command-Line Interface
===========================

The ``plc0`` command is a Click group with three subcommands:

- **tokenize**: print the token stream of a source file
- **compile**: write the instruction listing of a source file
- **run**: compile (or load a listing) and execute it on the stack machine
"""

__all__ = ["main", "errors"]
