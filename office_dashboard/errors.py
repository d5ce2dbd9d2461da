"""Exceptions raised by the dashboard engine."""


class DashboardError(Exception):
    """Base class for dashboard engine errors."""


class RepositoryUnavailable(DashboardError):
    """The record store could not be reached or read.

    Transient; callers should retry the whole aggregation. Results already
    produced for other offices remain valid.
    """

    def __init__(self, message: str, office_id: int | None = None):
        super().__init__(message)
        self.office_id = office_id


class InvalidPeriodSelector(DashboardError, ValueError):
    """A period kind or custom month/year outside the accepted bounds."""


class UnknownMetric(DashboardError, KeyError):
    """A ranking metric with no entry in the metric registry."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
