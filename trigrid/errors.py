# errors.py
class TriGridError(Exception):
    """Base class for failures reported to the caller."""


class NoDataError(TriGridError, ValueError):
    """No input points, so there is nothing to triangulate."""


class GridSetupError(TriGridError, ValueError):
    """Region, increments or companion grids cannot describe the output grid."""


class OptionError(TriGridError, ValueError):
    """Conflicting or missing run options."""


class InputError(TriGridError, ValueError):
    """The input table cannot be opened or does not have the expected columns."""
