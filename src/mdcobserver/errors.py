"""Exception raised when an attribute cannot be observed."""


class ObservationError(AttributeError):
    """Raised at registration time when a target attribute cannot be observed.

    Covers missing attributes, accessors (properties and other data
    descriptors), read-only targets, and targets whose class cannot be
    swapped. Nothing is instrumented when this is raised.
    """
