"""
Line source for task list documents.

A Document is an immutable, ordered sequence of lines. Every later stage
works on views over these lines and never mutates them.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Tuple, Union

from tasklist_validator.core.errors import DocumentReadError

logger = logging.getLogger(__name__)

# Hard cap on document size; realistic task lists are a few hundred KB at most
MAX_DOCUMENT_SIZE = 10 * 1024 * 1024


@dataclass(frozen=True)
class Document:
    """An in-memory task list document.

    Attributes:
        lines: Document lines without trailing newline characters
        source: Where the text came from (file path or "<string>")
    """

    lines: Tuple[str, ...]
    source: str = "<string>"

    @classmethod
    def from_text(cls, text: str, source: str = "<string>") -> "Document":
        # "\r\n" endings are normalised so patterns anchored with $ still match
        lines = tuple(text.replace("\r\n", "\n").replace("\r", "\n").split("\n"))
        return cls(lines=lines, source=source)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "Document":
        """Read a UTF-8 document from disk.

        Raises:
            DocumentReadError: If the file is missing, unreadable, too large or not UTF-8.
        """
        file_path = Path(path)
        try:
            size = file_path.stat().st_size
            if size > MAX_DOCUMENT_SIZE:
                raise DocumentReadError(
                    f"File {file_path} is {size:,} bytes, above the {MAX_DOCUMENT_SIZE:,} byte limit",
                    path=str(file_path),
                )
            text = file_path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise DocumentReadError(f"File {file_path} not found", path=str(file_path)) from exc
        except UnicodeDecodeError as exc:
            raise DocumentReadError(
                f"File {file_path} is not valid UTF-8: {exc.reason}", path=str(file_path)
            ) from exc
        except OSError as exc:
            raise DocumentReadError(
                f"Could not read {file_path}: {exc.strerror or exc}", path=str(file_path)
            ) from exc

        logger.debug("Read %s (%d bytes)", file_path, len(text))
        return cls.from_text(text, source=str(file_path))

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self.lines)

    def numbered(self) -> Iterator[Tuple[int, str]]:
        """Yield (1-based line number, line) pairs."""
        for index, line in enumerate(self.lines, start=1):
            yield index, line
