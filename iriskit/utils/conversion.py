import numpy as np


def is_number(value) -> bool:
    """True for ints and floats (Python or numpy), False for bools and everything else."""
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating))


def is_missing(value) -> bool:
    """None, an empty/blank string, or a float NaN."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (float, np.floating)):
        return bool(np.isnan(value))
    return False


def to_python(value):
    """Convert numpy scalars to their Python equivalent so they can be JSON encoded."""
    if isinstance(value, np.generic):
        return value.item()
    return value
