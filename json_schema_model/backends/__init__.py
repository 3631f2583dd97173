"""
Backends module.

Contains code generation backends that turn TypeDescriptors into source text.
"""

from __future__ import annotations

from .base import CodeBackend
from .python_backend import PythonDataclassBackend

__all__ = ["CodeBackend", "PythonDataclassBackend"]
