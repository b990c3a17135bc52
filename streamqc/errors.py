"""Exception types raised by streamqc."""


class StreamQCError(Exception):
    """Base class for all streamqc errors."""


class ConfigError(StreamQCError):
    """Invalid limits, adapter or contaminant configuration.

    Raised before any module runs; the message names the offending file or
    limit family.
    """


class OrderingViolation(StreamQCError):
    """A module was asked for output (or a phase) out of lifecycle order."""


class AggregateMismatch(StreamQCError):
    """The read aggregate lacks a counter, or a position, a module needs."""
