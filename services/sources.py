"""Form-file sources backed by the local filesystem."""

from collections.abc import Mapping
from pathlib import Path
from typing import BinaryIO


class LocalFiles:
    """Serve uploads from local paths, keyed by form field name."""

    def __init__(self, files: Mapping[str, str | Path]) -> None:
        self._files = {name: Path(path) for name, path in files.items()}

    def open_file(self, field_name: str) -> BinaryIO:
        path = self._files.get(field_name)
        if path is None:
            raise KeyError(field_name)
        return path.open("rb")

