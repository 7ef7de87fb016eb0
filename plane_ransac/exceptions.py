"""
Exception hierarchy for plane RANSAC.

Precondition violations raised by the core (empty cloud sampling, invalid
iteration parameters, removal of absent points) abort a run and reach the
caller; per-trial degeneracies are absorbed inside a pass.
"""


class PlaneRansacError(Exception):
    """Base class for all errors raised by this package."""


class InvalidParameterError(PlaneRansacError, ValueError):
    """A configuration or algorithm parameter is outside its valid range."""


class EmptyCloudError(PlaneRansacError, IndexError):
    """A point was requested from a cloud that holds no points."""


class PointNotFoundError(PlaneRansacError, ValueError):
    """A point scheduled for removal is not a member of the cloud."""


class DegeneratePlaneError(PlaneRansacError, ZeroDivisionError):
    """A distance was requested from a plane whose normal is the zero vector."""


class CloudFormatError(PlaneRansacError, ValueError):
    """A point cloud file contains a record that cannot be parsed."""
