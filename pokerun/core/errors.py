"""
Error classes for load-time failures.

Battle and run transitions never raise for expected conditions; they log a
diagnostic and return. These exceptions are only raised by the data loaders.
"""
from __future__ import annotations

class PokerunError(Exception):
    pass

class DataLoadError(PokerunError):
    def __init__(self, path: str, detail: str):
        super().__init__(f"Failed to load {path}: {detail}")
        self.path = path
        self.detail = detail

class ValidationError(PokerunError):
    pass
