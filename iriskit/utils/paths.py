import os
from pathlib import Path
from typing import Union

DATA_DIR_ENV = "IRISKIT_DATA_DIR"


def iriskit_data_dir() -> Path:
    try:
        directory = os.environ[DATA_DIR_ENV]
    except KeyError:
        msg = f""" Please make sure {DATA_DIR_ENV} is in your system environment:
            add: 'export {DATA_DIR_ENV}=/path/to/datasets' to your bashrc and source it."""
        raise RuntimeError(msg)
    return Path(directory)


def check_file_exists(path: Union[str, Path]) -> None:
    if not os.path.exists(path):
        raise FileNotFoundError(f"File not found: {path}")


def resolve_data_path(path: Union[str, Path]) -> Path:
    """
    Find a dataset file. Absolute paths and paths that exist relative to the
    working directory are returned as is; other relative paths are looked up
    under the IRISKIT_DATA_DIR directory when that variable is set.
    """
    path = Path(path)
    if path.is_absolute() or path.exists() or DATA_DIR_ENV not in os.environ:
        return path
    return iriskit_data_dir() / path


def check_parent_dir_exists(path: Union[str, Path]) -> None:
    parent = Path(path).resolve().parent
    if not parent.is_dir():
        raise FileNotFoundError(f"Output directory does not exist: {parent}")
