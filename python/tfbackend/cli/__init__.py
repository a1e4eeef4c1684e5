"""
tfbackend CLI module.

This module provides the command-line interface for tfbackend.
"""

from .main import cli, main
from .serve import serve_command

__all__ = ["cli", "main", "serve_command"]
