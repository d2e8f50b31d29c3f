"""Errors raised while producing a Polarion report."""


class PolarionReportError(Exception):
    """Base class for report generation failures."""


class ConfigurationError(PolarionReportError):
    """Required run configuration is missing or unreadable."""


class ReportWriteError(PolarionReportError):
    """The report file could not be created or written."""


class SerializationError(PolarionReportError):
    """The report model could not be encoded as XML."""


class ReportReadError(PolarionReportError):
    """An existing report file could not be read."""
