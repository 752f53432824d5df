"""Exception hierarchy for the exporter.

Only ConfigurationError is fatal. PollError subclasses are contained by the
poll loop that raised them; ValueParseError is contained per query record.
"""


class PrestoExporterError(Exception):
    """Base class for exporter errors."""


class ConfigurationError(PrestoExporterError):
    """Static misconfiguration that no retry can fix."""


class PollError(PrestoExporterError):
    """A single poll cycle failed; the loop retries on schedule."""


class FetchError(PollError):
    """Transport failure talking to Presto."""


class DecodeError(PollError):
    """Presto answered with a body that is not the expected JSON shape."""


class ValueParseError(PrestoExporterError, ValueError):
    """A timestamp or duration field could not be parsed."""
