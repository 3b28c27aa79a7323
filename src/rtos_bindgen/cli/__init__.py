"""
rtos-bindgen Command-Line Interface
===================================

- **rtos-macrogen**: function-like macro transpiler and constants header
  writer

Implemented as a Click command group with per-command help and uniform
exit codes (see cli.errors).
"""

__all__ = ["macrogen"]
