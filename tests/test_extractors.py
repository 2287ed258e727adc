import json

import numpy as np
import pytest

from iriskit.exceptions import FormatError, SchemaError
from iriskit.io.extractors import CSV, NDJSON
from iriskit.io.readers import iter_labeled, read_labeled
from iriskit.ml.dataset import LabeledDataset
from iriskit.processing.transformers import NumericStringConverter
from testing_utils import make_dataset

IRIS_CSV = """sepal-length,sepal-width,petal-length,petal-width,class
5.1,3.5,1.4,0.2,Iris-setosa
7.0,3.2,4.7,1.4,Iris-versicolor

6.3,3.3,6.0,2.5,Iris-virginica
"""


@pytest.fixture
def iris_csv(tmp_path):
    path = tmp_path / "dataset.csv"
    path.write_text(IRIS_CSV)
    return path


class TestCSV:
    """Test cases for the CSV extractor."""

    def test_extract_yields_dicts_keyed_by_header(self, iris_csv):
        """Test that rows are yielded as dicts keyed by the header, skipping blank lines."""
        records = list(CSV(iris_csv).extract())
        assert len(records) == 3
        assert records[0] == {
            "sepal-length": "5.1",
            "sepal-width": "3.5",
            "petal-length": "1.4",
            "petal-width": "0.2",
            "class": "Iris-setosa",
        }

    def test_extract_is_lazy(self, tmp_path):
        """Test that rows are read one at a time and a bad row names its line."""
        path = tmp_path / "bad.csv"
        path.write_text("a,b\n1,2\n1,2,3\n")
        records = CSV(path).extract()
        assert next(records) == {"a": "1", "b": "2"}
        with pytest.raises(FormatError, match=":3: expected 2 fields, found 3"):
            next(records)

    def test_without_header_yields_lists(self, tmp_path):
        """Test that files without a header yield lists of fields."""
        path = tmp_path / "plain.csv"
        path.write_text("1;2;a\n3;4;b\n")
        assert list(CSV(path, header=False, delimiter=";")) == [["1", "2", "a"], ["3", "4", "b"]]

    def test_custom_enclosure(self, tmp_path):
        """Test that the enclosure character quotes fields containing the delimiter."""
        path = tmp_path / "quoted.csv"
        path.write_text("name,class\n'a, b',x\n")
        assert list(CSV(path, enclosure="'")) == [{"name": "a, b", "class": "x"}]

    def test_duplicate_header_raises(self, tmp_path):
        """Test that a header with repeated names raises SchemaError."""
        path = tmp_path / "dup.csv"
        path.write_text("a,a\n1,2\n")
        with pytest.raises(SchemaError):
            list(CSV(path))

    def test_missing_file_raises(self, tmp_path):
        """Test that reading a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            list(CSV(tmp_path / "missing.csv"))

    def test_invalid_delimiter(self, tmp_path):
        """Test that a multi-character delimiter raises ValueError."""
        with pytest.raises(ValueError):
            CSV(tmp_path / "x.csv", delimiter=",,")

    def test_export_rows_with_header(self, tmp_path):
        """Test that plain rows are written below the given header."""
        path = tmp_path / "rows.csv"
        CSV(path).export([[1, 2.5, "a"], [np.float64(3.0), 4, "b"]], header=["x", "y", "class"])
        assert path.read_text().splitlines() == ["x,y,class", "1,2.5,a", "3.0,4,b"]

    def test_export_without_overwrite_raises(self, tmp_path):
        """Test that export() refuses to replace a file when overwrite is False."""
        path = tmp_path / "rows.csv"
        path.write_text("keep")
        with pytest.raises(FileExistsError):
            CSV(path).export([[1, "a"]], overwrite=False)
        assert path.read_text() == "keep"

    def test_export_missing_directory_raises(self, tmp_path):
        """Test that export() into a missing directory raises OSError."""
        with pytest.raises(OSError):
            CSV(tmp_path / "missing" / "rows.csv").export([[1, "a"]])

    def test_export_dataset_with_extra_column(self, tmp_path):
        """Test that a dataset is written with its label and extra columns."""
        dataset = LabeledDataset(X=[[1.5, 2.0], [3.0, 4.25]], y=["a", "b"], feature_names=["x", "y"])
        path = tmp_path / "predictions.csv"
        CSV(path).export(dataset, extra_columns={"prediction": ["a", "a"]})
        assert path.read_text().splitlines() == ["x,y,class,prediction", "1.5,2.0,a,a", "3.0,4.25,b,a"]

    def test_export_dataset_rejects_misaligned_extra_column(self, tmp_path):
        """Test that an extra column of the wrong length raises SchemaError."""
        dataset = LabeledDataset(X=[[1.0], [2.0]], y=["a", "b"])
        with pytest.raises(SchemaError):
            CSV(tmp_path / "out.csv").export(dataset, extra_columns={"prediction": ["a"]})

    def test_round_trip(self, tmp_path):
        """Test that exporting then reading back with numeric conversion reproduces the dataset."""
        dataset = make_dataset((5, 5, 5), n_features=4)
        path = tmp_path / "round_trip.csv"
        CSV(path).export(dataset)

        reread = read_labeled(CSV(path), features=dataset.feature_names, label="class")
        assert reread.feature_types() == ["categorical"] * 4

        converted = reread.apply(NumericStringConverter())
        np.testing.assert_array_equal(converted.X, dataset.X)
        assert converted.labels == dataset.labels
        assert converted.feature_names == dataset.feature_names


class TestNDJSON:
    """Test cases for the NDJSON extractor."""

    def test_extract(self, tmp_path):
        """Test that each line is yielded as a JSON object, skipping blank lines."""
        path = tmp_path / "dataset.ndjson"
        path.write_text('{"a": 1.0, "b": 2, "class": "x"}\n\n{"a": 3.5, "b": 4, "class": "y"}\n')
        assert list(NDJSON(path)) == [{"a": 1.0, "b": 2, "class": "x"}, {"a": 3.5, "b": 4, "class": "y"}]

    def test_invalid_json_raises_with_line_number(self, tmp_path):
        """Test that invalid JSON raises FormatError naming the line."""
        path = tmp_path / "bad.ndjson"
        path.write_text('{"a": 1}\n{"a": \n')
        with pytest.raises(FormatError, match=":2:"):
            list(NDJSON(path))

    def test_scalar_line_raises(self, tmp_path):
        """Test that a line holding a scalar raises FormatError."""
        path = tmp_path / "scalar.ndjson"
        path.write_text("42\n")
        with pytest.raises(FormatError):
            list(NDJSON(path))

    def test_export_dataset(self, tmp_path):
        """Test that a dataset is written as one object per row."""
        dataset = LabeledDataset(X=[[1.0, 2.0]], y=["a"], feature_names=["x", "y"])
        path = tmp_path / "out.ndjson"
        NDJSON(path).export(dataset)
        assert [json.loads(line) for line in path.read_text().splitlines()] == [{"x": 1.0, "y": 2.0, "class": "a"}]

    def test_round_trip(self, tmp_path):
        """Test that exporting then reading back reproduces the dataset."""
        dataset = make_dataset((3, 3), n_features=3)
        path = tmp_path / "round_trip.ndjson"
        NDJSON(path).export(dataset)
        reread = LabeledDataset.from_iterator(NDJSON(path))
        np.testing.assert_array_equal(reread.X, dataset.X)
        assert reread.labels == dataset.labels


class TestReadLabeled:
    """Test cases for applying a schema to records."""

    def test_positional_schema_uses_last_column_as_label(self):
        """Test that without a schema the last column is the label."""
        dataset = read_labeled([{"a": 1, "b": 2, "c": "x"}, {"a": 3, "b": 4, "c": "y"}])
        assert dataset.feature_names == ["a", "b"]
        assert dataset.labels == ["x", "y"]

    def test_named_schema_selects_and_orders_columns(self):
        """Test that declared features are selected in the declared order."""
        records = [{"class": "x", "a": "1", "b": "2", "ignored": "z"}]
        dataset = read_labeled(records, features=["b", "a"], label="class")
        assert dataset.feature_names == ["b", "a"]
        assert dataset.X.tolist() == [["2", "1"]]

    def test_list_records_use_offsets(self):
        """Test that list records are addressed by offset."""
        dataset = read_labeled([["x", 1.0, 2.0], ["y", 3.0, 4.0]], features=[1, 2], label=0)
        assert dataset.labels == ["x", "y"]
        np.testing.assert_array_equal(dataset.X, [[1.0, 2.0], [3.0, 4.0]])

    def test_absent_declared_column_raises_schema_error(self):
        """Test that a declared feature missing from the records raises SchemaError."""
        with pytest.raises(SchemaError, match="sepal-with"):
            read_labeled([{"sepal-width": "1", "class": "x"}], features=["sepal-with"], label="class")

    def test_absent_label_column_raises_schema_error(self):
        """Test that a label column missing from the records raises SchemaError."""
        with pytest.raises(SchemaError):
            read_labeled([{"a": "1", "b": "x"}], label="class")

    def test_named_columns_for_list_records_raise(self):
        """Test that list records cannot be addressed by column name."""
        with pytest.raises(SchemaError):
            read_labeled([["1", "x"]], features=["a"])

    def test_label_declared_as_feature_raises(self):
        """Test that the label column cannot also be a feature."""
        with pytest.raises(SchemaError):
            read_labeled([{"a": "1", "b": "x"}], features=["a", "b"], label="b")

    def test_field_count_mismatch_raises_format_error(self):
        """Test that a record with a different field count raises FormatError."""
        with pytest.raises(FormatError, match="Record 2"):
            read_labeled([["1", "2", "x"], ["1", "x"]])

    def test_missing_value_raises_format_error(self):
        """Test that missing feature values and labels raise FormatError."""
        with pytest.raises(FormatError, match="missing value"):
            read_labeled([{"a": "1", "class": "x"}, {"a": "", "class": "y"}])
        with pytest.raises(FormatError, match="missing label"):
            read_labeled([{"a": "1", "class": None}])

    def test_no_records_raises(self):
        """Test that a source with no records raises ValueError."""
        with pytest.raises(ValueError):
            read_labeled([])

    def test_iter_labeled_is_lazy(self):
        """Test that iter_labeled() reads no further than it has to."""
        def records():
            yield {"a": "1", "class": "x"}
            raise AssertionError("read past the first record")

        pairs = iter_labeled(records())
        assert next(pairs) == (["1"], "x")

    def test_values_are_not_coerced(self, iris_csv):
        """Test that numeric strings are kept as strings when read."""
        dataset = LabeledDataset.from_iterator(CSV(iris_csv), label="class")
        assert dataset.X[0, 0] == "5.1"
        assert dataset.feature_types() == ["categorical"] * 4


class TestEncoding:
    """Test cases for files that are not valid UTF-8."""

    def test_csv_with_invalid_bytes_raises_format_error(self, tmp_path):
        """Test that undecodable bytes in a CSV surface as a FormatError."""
        path = tmp_path / "latin.csv"
        path.write_bytes(b"a,class\n1,x\n\xff\xfe,y\n")
        with pytest.raises(FormatError, match="UTF-8"):
            list(CSV(path))

    def test_ndjson_with_invalid_bytes_raises_format_error(self, tmp_path):
        """Test that undecodable bytes in an NDJSON file surface as a FormatError."""
        path = tmp_path / "latin.ndjson"
        path.write_bytes(b'{"a": 1, "class": "x"}\n{"a": "\xff", "class": "y"}\n')
        with pytest.raises(FormatError, match="UTF-8"):
            list(NDJSON(path))
