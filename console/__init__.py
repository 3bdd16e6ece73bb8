"""
Console Module

Configuration and command-line front end for the record store.

This module provides:
- YAML-based configuration loading
- Interactive menu shell
- One-shot CLI commands (list, show, add, update, remove)
"""

__version__ = "0.1.0"
