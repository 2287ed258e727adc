"""
iriskit: load a labeled tabular dataset, describe and transform it, and
evaluate a k nearest neighbors classifier on it.
"""

from iriskit.exceptions import FormatError, SchemaError, StateError
from iriskit.ml.dataset import LabeledDataset
from iriskit.ml.knn import KNearestNeighbors

__version__ = "0.1.0"

__all__ = ['FormatError', 'SchemaError', 'StateError', 'LabeledDataset', 'KNearestNeighbors']
