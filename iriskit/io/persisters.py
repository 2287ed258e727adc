import logging
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


class Filesystem:
    """
    Writes text to a single file on the local filesystem.

    Existing files are overwritten unless overwrite is False. Parent
    directories are not created: a missing directory is an error.
    """

    def __init__(self, path: Union[str, Path], overwrite: bool = True):
        self.path = Path(path)
        self.overwrite = overwrite

    def save(self, text: str) -> Path:
        """
        Write text to the file.

        Returns:
            The path written to.

        Raises:
            FileExistsError: If the file exists and overwrite is False.
            OSError: If the file cannot be written (missing directory, permissions).
        """
        if not self.overwrite and self.path.exists():
            raise FileExistsError(f"Refusing to overwrite existing file: {self.path}")
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(text)
        logger.debug("Saved %d characters to %s", len(text), self.path)
        return self.path

    def load(self) -> str:
        with open(self.path, "r", encoding="utf-8") as f:
            return f.read()

    def __str__(self) -> str:
        return f"Filesystem({self.path})"
