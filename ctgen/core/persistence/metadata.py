"""
Metadata registry — the hand-off file between server and client phases.

The server phase writes one line per launcher it materialized:

    <absolute launcher path>#<entry point>#<package name>

The client phase reads the lines back, runs each launcher, and deletes
the file. No escaping is defined for the delimiter: a field containing
it is rejected at write time instead of producing a line that would
parse differently.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ctgen.core.errors import DelimiterCollisionError, MetadataParseError
from ctgen.core.models.generation import GenerationRecord

logger = logging.getLogger(__name__)

DELIMITER = "#"


def encode_record(record: GenerationRecord) -> str:
    """Serialize a record to its metadata line."""
    fields = {
        "launcher_path": str(record.launcher_path),
        "entry_point": record.entry_point,
        "package_name": record.package_name,
    }
    for name, value in fields.items():
        if DELIMITER in value:
            raise DelimiterCollisionError(name, value, DELIMITER)
        if "\n" in value or "\r" in value:
            raise DelimiterCollisionError(name, value, "\\n")
    return DELIMITER.join(fields.values())


def decode_record(line: str, path: Path, line_num: int) -> GenerationRecord:
    """Parse one metadata line back into a record."""
    parts = line.split(DELIMITER)
    if len(parts) != 3 or not all(parts):
        raise MetadataParseError(path, line_num, line)
    launcher_path, entry_point, package_name = parts
    return GenerationRecord(
        launcher_path=Path(launcher_path),
        entry_point=entry_point,
        package_name=package_name,
    )


class MetadataRegistry:
    """Reads, writes and consumes one server module's metadata file."""

    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def write(self, records: list[GenerationRecord]) -> None:
        """Replace the metadata file with the given records, in order.

        Raises:
            DelimiterCollisionError: If any field contains the delimiter.
                Nothing is written in that case.
        """
        lines = [encode_record(r) for r in records]
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            "".join(line + "\n" for line in lines),
            encoding="utf-8",
        )
        logger.debug("Wrote %d metadata record(s) to %s", len(lines), self._path)

    def read(self) -> list[GenerationRecord] | None:
        """Read all records.

        Returns:
            The records in file order, or None if there is no metadata
            file (nothing configured, or already consumed).

        Raises:
            MetadataParseError: On a line without exactly three fields.
        """
        if not self._path.is_file():
            return None

        records = []
        with self._path.open("r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.rstrip("\r\n")
                if not line.strip():
                    continue
                records.append(decode_record(line, self._path, line_num))
        return records

    def consume(self) -> None:
        """Delete the metadata file once its records have been handled."""
        if self._path.is_file():
            self._path.unlink()
            logger.debug("Consumed metadata %s", self._path)
