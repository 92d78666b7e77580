"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/errors.py
Exception hierarchy shared by the scanner, fingerprinting, selection and output layers.
"""


class PicSorterError(Exception):
    """Base class for all errors raised by picsorter."""


class EnumerationError(PicSorterError, RuntimeError):
    """Input directory missing, not a directory, or not readable."""


class DecodeError(PicSorterError, RuntimeError):
    """File could not be decoded or reduced to a fingerprint sample."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot decode {path}: {reason}")
        self.path = path
        self.reason = reason


class MaterializationError(PicSorterError, RuntimeError):
    """Copy or move of a selected file failed."""


class ConfigurationError(PicSorterError, ValueError):
    """Invalid flag combination or invalid standalone copy request."""
