"""
Turning extracted records into labeled datasets, and back.

A schema names the feature columns and the label column. Column references
are names for dict records (CSV with a header, NDJSON objects) and integer
offsets for list records. When the schema is omitted it is positional: the
last column is the label and every other column is a feature.

Values are passed through untouched. Numeric strings stay strings until a
NumericStringConverter is applied to the dataset.
"""
import itertools
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, TYPE_CHECKING

from iriskit.exceptions import FormatError, SchemaError
from iriskit.utils.conversion import is_missing, to_python

if TYPE_CHECKING:
    from iriskit.ml.dataset import LabeledDataset


def iter_labeled(records: Iterable,
                 features: Optional[Sequence] = None,
                 label: Optional[Any] = None) -> Iterator[Tuple[List[Any], Any]]:
    """
    Lazily yield (feature vector, label) pairs from records.

    The schema is resolved against the first record; every later record
    must have the same number of fields.

    Raises:
        SchemaError: If a declared column is absent from the first record.
        FormatError: If a record has a different field count or a missing value.
    """
    iterator = iter(records)
    first = next(iterator, None)
    if first is None:
        return
    feature_keys, label_key, _ = resolve_schema(first, features, label)

    for number, record in enumerate(itertools.chain([first], iterator), start=1):
        if type(record) is not type(first):
            raise FormatError(f"Record {number} is a {type(record).__name__}, expected {type(first).__name__}")
        if len(record) != len(first):
            raise FormatError(f"Record {number} has {len(record)} fields, expected {len(first)}")
        try:
            vector = [record[key] for key in feature_keys]
            target = record[label_key]
        except (KeyError, IndexError) as e:
            raise FormatError(f"Record {number} is missing column {e}") from e

        for key, value in zip(feature_keys, vector):
            if is_missing(value):
                raise FormatError(f"Record {number} has a missing value in column {key!r}")
        if is_missing(target):
            raise FormatError(f"Record {number} has a missing label in column {label_key!r}")

        yield vector, target


def read_labeled(records: Iterable,
                 features: Optional[Sequence] = None,
                 label: Optional[Any] = None) -> 'LabeledDataset':
    """
    Materialise records into a LabeledDataset.

    Args:
        records: Records yielded by an extractor (dicts or lists).
        features: Feature column names or offsets. Defaults to every column except the label.
        label: Label column name or offset. Defaults to the last column.

    Returns:
        LabeledDataset with feature names taken from the schema.

    Raises:
        ValueError: If there are no records.
        SchemaError: If a declared column is absent.
        FormatError: If a record is malformed or has a missing value.
    """
    from iriskit.ml.dataset import LabeledDataset

    iterator = iter(records)
    first = next(iterator, None)
    if first is None:
        raise ValueError("Cannot build a dataset from a source with no records")
    _, _, feature_names = resolve_schema(first, features, label)

    samples, labels = [], []
    for vector, target in iter_labeled(itertools.chain([first], iterator), features, label):
        samples.append(vector)
        labels.append(target)

    return LabeledDataset(X=samples, y=labels, feature_names=feature_names)


def resolve_schema(record, features: Optional[Sequence], label: Optional[Any]):
    """
    Map a schema onto the columns of a record.

    Returns:
        Tuple of (feature keys, label key, feature names), where keys index
        into the record and names are used for the dataset columns.
    """
    if isinstance(record, dict):
        columns = list(record.keys())
    elif isinstance(record, list):
        columns = list(range(len(record)))
    else:
        raise FormatError(f"Records must be dicts or lists, got {type(record).__name__}")

    if len(columns) < 2:
        raise SchemaError(f"Records need at least one feature column and a label column, got {len(columns)} columns")

    label_key = columns[-1] if label is None else _column_key(label, columns, record)
    if features is None:
        feature_keys = [column for column in columns if column != label_key]
    else:
        feature_keys = [_column_key(feature, columns, record) for feature in features]
        if not feature_keys:
            raise SchemaError("At least one feature column must be declared")
        if label_key in feature_keys:
            raise SchemaError(f"Label column {label_key!r} is also declared as a feature")
        if len(set(feature_keys)) != len(feature_keys):
            raise SchemaError(f"Duplicate feature columns declared: {list(features)}")

    if isinstance(record, dict):
        feature_names = [str(key) for key in feature_keys]
    else:
        feature_names = None
    return feature_keys, label_key, feature_names


def _column_key(reference, columns: list, record):
    if isinstance(record, dict):
        if isinstance(reference, int) and not isinstance(reference, bool):
            if not -len(columns) <= reference < len(columns):
                raise SchemaError(f"Column offset {reference} is out of range for {len(columns)} columns")
            return columns[reference]
        if reference not in columns:
            raise SchemaError(f"Column {reference!r} not found. Available columns: {columns}")
        return reference

    if not isinstance(reference, int) or isinstance(reference, bool):
        raise SchemaError(f"Column {reference!r} cannot be resolved: records without a header are addressed by offset")
    if not -len(columns) <= reference < len(columns):
        raise SchemaError(f"Column offset {reference} is out of range for {len(columns)} columns")
    return columns[reference]


def dataset_to_records(dataset: 'LabeledDataset',
                       label_column: str = "class",
                       extra_columns: Optional[Dict[str, Sequence]] = None) -> Tuple[List[str], List[list]]:
    """
    Flatten a dataset into a header and rows: the features, then the label,
    then any extra columns (e.g. predictions) in the order given.

    Raises:
        SchemaError: If a column name collides or an extra column has the wrong length.
    """
    extra_columns = extra_columns or {}
    header = list(dataset.feature_names) + [label_column] + list(extra_columns.keys())
    if len(set(header)) != len(header):
        raise SchemaError(f"Duplicate column names in export: {header}")
    for name, values in extra_columns.items():
        if len(values) != len(dataset):
            raise SchemaError(f"Column {name!r} has {len(values)} values for {len(dataset)} rows")

    extras = list(zip(*extra_columns.values())) if extra_columns else [()] * len(dataset)
    rows = [
        [to_python(value) for value in vector] + [label] + [to_python(value) for value in extra]
        for (vector, label), extra in zip(dataset, extras)
    ]
    return header, rows
