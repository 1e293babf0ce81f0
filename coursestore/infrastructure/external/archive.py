"""Course package (zip) reader."""

from __future__ import annotations

import zipfile
from collections.abc import Iterator

from coursestore.domain.exceptions import InvalidPackageError


def iter_archive_entries(zip_path: str) -> Iterator[tuple[str, bytes]]:
    """Yield (entry_name, content) for each file in the archive, lazily.

    Directory entries are skipped. Raises InvalidPackageError when the file
    is missing or is not a readable zip.
    """
    try:
        archive = zipfile.ZipFile(zip_path)
    except (OSError, zipfile.BadZipFile) as e:
        raise InvalidPackageError(zip_path, str(e)) from e
    with archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            try:
                data = archive.read(info)
            except (zipfile.BadZipFile, OSError, RuntimeError) as e:
                raise InvalidPackageError(zip_path, f"{info.filename}: {e}") from e
            yield info.filename, data
