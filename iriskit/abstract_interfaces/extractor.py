from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, Union


class Extractor(ABC):
    """
    Abstract base class for tabular data sources backed by a file.

    Extractors read lazily: extract() returns a generator that yields one
    record at a time (a dict keyed by column name, or a list for sources
    without column names). Iterating over an extractor is the same as
    calling extract().

    Extractors also know how to write records back to their format with
    export(), which overwrites the file unless told otherwise.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    @abstractmethod
    def extract(self) -> Iterator[Union[dict, list]]:
        """
        Yield the records of the source in file order.

        Raises:
            FileNotFoundError: If the file does not exist.
            FormatError: If a record is malformed.
        """
        pass

    @abstractmethod
    def export(self, data, overwrite: bool = True, **kwargs) -> Path:
        """
        Write records (or a LabeledDataset) to the file.

        Returns:
            The path written to.

        Raises:
            FileExistsError: If the file exists and overwrite is False.
            OSError: If the file cannot be written.
        """
        pass

    def __iter__(self):
        return self.extract()

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.path})"
