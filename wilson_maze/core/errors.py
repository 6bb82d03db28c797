class MazeConfigError(ValueError):
    """Invalid generation parameters (dimensions, iteration cap, origin)."""


class MazeInvariantError(AssertionError):
    """
    Internal consistency failure in the generator (bad connect, bad path op).
    Raised explicitly so it survives `python -O`.
    """
