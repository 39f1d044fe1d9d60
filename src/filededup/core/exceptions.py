"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/exceptions.py
Domain errors raised by the fingerprinting, rule and scan layers.
"""


class UnreadableSource(RuntimeError):
    """The byte source of a single file could not be opened or read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")


class InvalidRule(ValueError):
    """A categorization rule (or rule document) is malformed."""


class ScanCancelled(RuntimeError):
    """The caller aborted a scan; no partial result is produced."""
