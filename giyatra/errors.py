"""Exceptions raised by the GI Yatra scheduling engine and its adapters."""


class GiyatraError(Exception):
    """Base class for all GI Yatra errors."""


class InvalidConfiguration(GiyatraError, ValueError):
    """Trip parameters cannot produce a schedule (bad time window or day count)."""


class NoWaypointsSelected(GiyatraError, ValueError):
    """A schedule was requested for a trip without any selected locations."""


class CatalogError(GiyatraError):
    """The location catalog could not be reached or returned an unusable payload."""


class TripNotFound(GiyatraError, KeyError):
    """No stored trip has the requested id."""
