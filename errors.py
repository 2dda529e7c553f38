class GeometryError(ValueError):
    """Non-positive radius or font size handed to the arc layout.

    Always a bug in derived geometry, never a user-input problem.
    """


class CompositeFailure(RuntimeError):
    """The finished surface could not be encoded for export."""


class UploadRejected(ValueError):
    """An upload failed validation. ``str(exc)`` is safe to show to the user."""
