import csv
import json
import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Union

from iriskit.abstract_interfaces.extractor import Extractor
from iriskit.exceptions import FormatError, SchemaError
from iriskit.io.readers import dataset_to_records
from iriskit.ml.dataset import LabeledDataset
from iriskit.utils.conversion import to_python
from iriskit.utils.paths import check_file_exists

logger = logging.getLogger(__name__)


class CSV(Extractor):
    """
    Delimited text file, optionally with a header row.

    With a header, records are dicts keyed by column name; without one they
    are lists of field values. Field values are always returned as strings.
    """

    def __init__(self,
                 path: Union[str, Path],
                 header: bool = True,
                 delimiter: str = ",",
                 enclosure: str = '"'):
        super().__init__(path)
        if len(delimiter) != 1:
            raise ValueError(f"Delimiter must be a single character, got {delimiter!r}")
        if len(enclosure) != 1:
            raise ValueError(f"Enclosure must be a single character, got {enclosure!r}")
        self.header = header
        self.delimiter = delimiter
        self.enclosure = enclosure

    def extract(self) -> Iterator[Union[Dict[str, str], List[str]]]:
        check_file_exists(self.path)
        with open(self.path, "r", newline="", encoding="utf-8") as f:
            reader = csv.reader(f, delimiter=self.delimiter, quotechar=self.enclosure)
            columns = None
            try:
                for row in reader:
                    if not row or (len(row) == 1 and not row[0].strip()):
                        continue
                    if self.header and columns is None:
                        columns = [name.strip() for name in row]
                        if len(set(columns)) != len(columns):
                            raise SchemaError(f"{self.path}: duplicate column names in header {columns}")
                        continue
                    if columns is not None and len(row) != len(columns):
                        raise FormatError(
                            f"{self.path}:{reader.line_num}: expected {len(columns)} fields, found {len(row)}"
                        )
                    yield dict(zip(columns, row)) if columns is not None else row
            except csv.Error as e:
                raise FormatError(f"{self.path}:{reader.line_num}: {e}") from e
            except UnicodeDecodeError as e:
                raise FormatError(f"{self.path}: not valid UTF-8 text after line {reader.line_num}: {e.reason}") from e

    def export(self,
               data: Union[LabeledDataset, Sequence[Sequence]],
               overwrite: bool = True,
               header: Optional[Sequence[str]] = None,
               label_column: str = "class",
               extra_columns: Optional[Dict[str, Sequence]] = None) -> Path:
        """
        Write rows to the file.

        Args:
            data: A LabeledDataset (features followed by the label column) or plain rows.
            overwrite: Replace an existing file. If False an existing file is an error.
            header: Column names for plain rows. Ignored for datasets.
            label_column: Name of the label column when exporting a dataset.
            extra_columns: Additional columns appended to a dataset export,
                e.g. {"prediction": predictions}.

        Returns:
            The path written to.
        """
        if isinstance(data, LabeledDataset):
            header, rows = dataset_to_records(data, label_column, extra_columns)
        else:
            rows = [[to_python(value) for value in row] for row in data]

        if not overwrite and self.path.exists():
            raise FileExistsError(f"Refusing to overwrite existing file: {self.path}")
        with open(self.path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, delimiter=self.delimiter, quotechar=self.enclosure)
            if self.header and header is not None:
                writer.writerow(header)
            writer.writerows(rows)

        logger.info("Exported %d rows to %s", len(rows), self.path)
        return self.path


class NDJSON(Extractor):
    """
    Newline-delimited JSON: one object (or array) per line. Blank lines are skipped.
    """

    def extract(self) -> Iterator[Union[dict, list]]:
        check_file_exists(self.path)
        line_num = 0
        with open(self.path, "r", encoding="utf-8") as f:
            try:
                for line_num, line in enumerate(f, start=1):
                    if not line.strip():
                        continue
                    try:
                        record = json.loads(line)
                    except json.JSONDecodeError as e:
                        raise FormatError(f"{self.path}:{line_num}: invalid JSON: {e.msg}") from e
                    if not isinstance(record, (dict, list)):
                        raise FormatError(
                            f"{self.path}:{line_num}: expected a JSON object or array, got {type(record).__name__}"
                        )
                    yield record
            except UnicodeDecodeError as e:
                raise FormatError(f"{self.path}: not valid UTF-8 text after line {line_num}: {e.reason}") from e

    def export(self,
               data: Union[LabeledDataset, Sequence[Union[dict, list]]],
               overwrite: bool = True,
               label_column: str = "class",
               extra_columns: Optional[Dict[str, Sequence]] = None) -> Path:
        """
        Write records to the file, one JSON document per line.

        Datasets are written as objects keyed by feature name with the label
        under label_column; plain records are written as given.
        """
        if isinstance(data, LabeledDataset):
            header, rows = dataset_to_records(data, label_column, extra_columns)
            records = [dict(zip(header, row)) for row in rows]
        else:
            records = list(data)

        if not overwrite and self.path.exists():
            raise FileExistsError(f"Refusing to overwrite existing file: {self.path}")
        with open(self.path, "w", encoding="utf-8") as f:
            for record in records:
                f.write(json.dumps(record, default=to_python) + "\n")

        logger.info("Exported %d records to %s", len(records), self.path)
        return self.path
