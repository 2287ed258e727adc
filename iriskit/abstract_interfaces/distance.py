from abc import ABC, abstractmethod

import numpy as np


class Distance(ABC):
    """
    Abstract base class for dissimilarity measures between feature vectors.

    Subclasses implement compute() for a single pair. pairwise() has a
    generic implementation built on compute(); subclasses should override it
    with a vectorised version where one exists.
    """

    @abstractmethod
    def compute(self, a: np.ndarray, b: np.ndarray) -> float:
        """Return the distance between two vectors of equal length."""
        pass

    def pairwise(self, A: np.ndarray, B: np.ndarray) -> np.ndarray:
        """
        Distances between every row of A and every row of B.

        Args:
            A: Array of shape (n, d).
            B: Array of shape (m, d).

        Returns:
            Array of shape (n, m) where entry (i, j) is compute(A[i], B[j]).
        """
        A = np.atleast_2d(np.asarray(A, dtype=np.float64))
        B = np.atleast_2d(np.asarray(B, dtype=np.float64))
        return np.array([[self.compute(a, b) for b in B] for a in A], dtype=np.float64).reshape(len(A), len(B))

    def __str__(self) -> str:
        return f"{self.__class__.__name__}"
