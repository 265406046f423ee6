"""Exceptions raised while reading and interpreting DDS data."""

from __future__ import annotations


class DdsError(Exception):
    """Base class for every error raised by this package.

    Raised directly for generic failures such as a missing magic number,
    a truncated header or a texture that produced no subresources.
    """


class InvalidDataError(DdsError):
    """The DDS metadata is self-contradictory or malformed."""


class NotSupportedError(DdsError):
    """The DDS data describes a format or layout that cannot be loaded."""


class EndOfDataError(DdsError):
    """The pixel data ends before every described surface was read."""