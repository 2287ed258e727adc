from typing import Callable

import numpy as np
from scipy.spatial import distance as sp_distance

from iriskit.abstract_interfaces.distance import Distance


class _ScipyDistance(Distance):
    """Distance backed by a scipy.spatial.distance metric name."""
    metric = None

    def _metric_kwargs(self) -> dict:
        return {}

    def compute(self, a: np.ndarray, b: np.ndarray) -> float:
        return float(self.pairwise(a, b)[0, 0])

    def pairwise(self, A: np.ndarray, B: np.ndarray) -> np.ndarray:
        A = np.atleast_2d(np.asarray(A, dtype=np.float64))
        B = np.atleast_2d(np.asarray(B, dtype=np.float64))
        return sp_distance.cdist(A, B, metric=self.metric, **self._metric_kwargs())


class Euclidean(_ScipyDistance):
    """Straight-line (L2) distance."""
    metric = "euclidean"


class Manhattan(_ScipyDistance):
    """Sum of absolute coordinate differences (L1)."""
    metric = "cityblock"


class Chebyshev(_ScipyDistance):
    """Largest absolute coordinate difference (L-infinity)."""
    metric = "chebyshev"


class Minkowski(_ScipyDistance):
    """L-p distance. p=1 is Manhattan, p=2 is Euclidean."""
    metric = "minkowski"

    def __init__(self, p: float = 3.0):
        if p < 1:
            raise ValueError(f"p must be at least 1, got {p}")
        self.p = p

    def _metric_kwargs(self) -> dict:
        return {"p": self.p}

    def __str__(self) -> str:
        return f"Minkowski(p={self.p})"


class Cosine(_ScipyDistance):
    """
    One minus the cosine similarity. Zero vectors have no direction, so any
    distance involving one is reported as 1.0.
    """
    metric = "cosine"

    def pairwise(self, A: np.ndarray, B: np.ndarray) -> np.ndarray:
        A = np.atleast_2d(np.asarray(A, dtype=np.float64))
        B = np.atleast_2d(np.asarray(B, dtype=np.float64))
        norms_a = np.linalg.norm(A, axis=1)
        norms_b = np.linalg.norm(B, axis=1)
        with np.errstate(divide="ignore", invalid="ignore"):
            similarity = (A @ B.T) / np.outer(norms_a, norms_b)
        similarity[(norms_a == 0)[:, None] | (norms_b == 0)[None, :]] = 0.0
        return np.clip(1.0 - similarity, 0.0, 2.0)


class FunctionDistance(Distance):
    """Wraps any callable f(a, b) -> float as a Distance."""

    def __init__(self, function: Callable[[np.ndarray, np.ndarray], float]):
        if not callable(function):
            raise ValueError(f"Expected a callable, got {function!r}")
        self.function = function

    def compute(self, a: np.ndarray, b: np.ndarray) -> float:
        return float(self.function(np.asarray(a, dtype=np.float64), np.asarray(b, dtype=np.float64)))

    def __str__(self) -> str:
        return f"FunctionDistance({getattr(self.function, '__name__', repr(self.function))})"


DISTANCES = {
    "euclidean": Euclidean,
    "manhattan": Manhattan,
    "chebyshev": Chebyshev,
    "minkowski": Minkowski,
    "cosine": Cosine,
}


def get_distance(name: str, **params) -> Distance:
    """
    Instantiate a distance by name, e.g. get_distance("minkowski", p=3).

    Raises:
        ValueError: If the name is unknown or the parameters do not fit the distance.
    """
    if name.lower() not in DISTANCES:
        raise ValueError(f"Unknown distance: '{name}'. Available distances: {sorted(DISTANCES)}")
    try:
        return DISTANCES[name.lower()](**params)
    except TypeError as e:
        raise ValueError(f"Invalid parameters for distance '{name}': {e}") from e
