from collections import Counter
from typing import Any, Dict, List

import numpy as np
from scipy import stats

from iriskit.ml.dataset import CATEGORICAL, CONTINUOUS
from iriskit.ml.reports import Report
from iriskit.utils.conversion import to_python


def describe_columns(X: np.ndarray, feature_names: List[str], feature_types: List[str]) -> Report:
    """
    Compute summary statistics for every column of X.

    Continuous columns report count, mean, population variance and standard
    deviation, skewness, excess kurtosis, min, quartiles and max. Categorical
    columns report the count, number of categories and a frequency table in
    first-seen order.

    Args:
        X: 2-D sample array.
        feature_names: Name of each column, used as the report key.
        feature_types: 'continuous' or 'categorical' for each column.

    Returns:
        Report keyed by feature name.

    Raises:
        ValueError: If X has no rows.
    """
    if len(X) == 0:
        raise ValueError("Cannot describe an empty dataset")

    report = Report()
    for offset, (name, kind) in enumerate(zip(feature_names, feature_types)):
        column = X[:, offset]
        if kind == CONTINUOUS:
            report[name] = describe_continuous(column.astype(np.float64), offset)
        else:
            report[name] = describe_categorical(column, offset)
    return report


def describe_continuous(values: np.ndarray, offset: int) -> Dict[str, Any]:
    q1, median, q3 = np.percentile(values, [25, 50, 75])

    # skew/kurtosis are undefined for a constant column
    if np.ptp(values) == 0:
        skewness, kurtosis = 0.0, 0.0
    else:
        skewness = float(stats.skew(values))
        kurtosis = float(stats.kurtosis(values))

    return {
        "offset": offset,
        "type": CONTINUOUS,
        "count": int(len(values)),
        "mean": float(np.mean(values)),
        "variance": float(np.var(values)),
        "std_dev": float(np.std(values)),
        "skewness": skewness,
        "kurtosis": kurtosis,
        "min": float(np.min(values)),
        "25%": float(q1),
        "median": float(median),
        "75%": float(q3),
        "max": float(np.max(values)),
    }


def describe_categorical(values: np.ndarray, offset: int) -> Dict[str, Any]:
    counts = Counter(to_python(value) for value in values)
    total = len(values)
    return {
        "offset": offset,
        "type": CATEGORICAL,
        "count": total,
        "num_categories": len(counts),
        "counts": dict(counts),
        "probabilities": {category: count / total for category, count in counts.items()},
    }
