"""
Archive merging.

The published archive is built in three layers, in this order:
1. every file of the base archive (the prebuilt app shell)
2. the `_redirects` routing rule
3. every file of the uploaded archive, full relative path kept

Entries are keyed by name, so an uploaded file with the same path as a shell
file replaces it. Directory entries are not copied.
"""

import logging
import time
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

from .errors import InvalidArchiveError


logger = logging.getLogger(__name__)

REDIRECTS_PATH = "_redirects"
REDIRECTS_RULE = "/* /index.html 200"

# name -> (date_time, data)
Entries = Dict[str, Tuple[tuple, bytes]]


@dataclass
class MergeReport:
    """What went into a merged archive."""
    path: Path
    names: List[str] = field(default_factory=list)
    overridden: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def entry_count(self) -> int:
        return len(self.names)


def open_archive(path, label: str) -> zipfile.ZipFile:
    """Open a zip for reading, mapping corrupt files to InvalidArchiveError."""
    try:
        return zipfile.ZipFile(path, "r")
    except (zipfile.BadZipFile, OSError) as e:
        raise InvalidArchiveError(f"{label} is not a valid zip archive: {e}")


def _now_date_time() -> tuple:
    return time.localtime(time.time())[:6]


def add_base_entries(entries: Entries, base: zipfile.ZipFile):
    """Copy every non-directory entry of the shell archive."""
    for info in base.infolist():
        if info.is_dir():
            continue
        entries[info.filename] = (info.date_time, base.read(info))


def add_redirects(entries: Entries):
    """Add the single-page-app catch-all rule."""
    entries[REDIRECTS_PATH] = (_now_date_time(), REDIRECTS_RULE.encode("utf-8"))
    logger.info(f"Added {REDIRECTS_PATH} to archive")


def add_upload_entries(entries: Entries, upload: zipfile.ZipFile, report: MergeReport):
    """
    Copy every non-directory entry of the uploaded archive.

    An entry that cannot be read is logged and skipped; the rest of the
    upload still goes through.
    """
    for info in upload.infolist():
        if info.is_dir():
            continue
        try:
            data = upload.read(info)
        except Exception as e:
            logger.warning(f"Could not read upload entry {info.filename}: {e}")
            report.skipped.append(info.filename)
            continue

        if info.filename in entries:
            logger.info(f"Upload entry {info.filename} overrides base entry")
            report.overridden.append(info.filename)

        entries[info.filename] = (info.date_time, data)
        logger.debug(f"Merged upload entry: {info.filename}")


def write_archive(entries: Entries, out_path) -> Path:
    """Write entries to a new deflated zip at out_path."""
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(out_path, "w", compression=zipfile.ZIP_DEFLATED) as out:
        for name, (date_time, data) in entries.items():
            zinfo = zipfile.ZipInfo(name, date_time=date_time)
            zinfo.compress_type = zipfile.ZIP_DEFLATED
            out.writestr(zinfo, data)
    return out_path


def merge_archives(base_path, upload_path, out_path) -> MergeReport:
    """
    Merge the shell archive, the routing rule and the uploaded archive into
    a new zip at out_path.

    Raises:
        InvalidArchiveError: base or upload is not a readable zip
    """
    report = MergeReport(path=Path(out_path))
    entries: Entries = {}

    with open_archive(base_path, "base archive") as base:
        try:
            add_base_entries(entries, base)
        except (zipfile.BadZipFile, NotImplementedError, RuntimeError) as e:
            raise InvalidArchiveError(f"base archive could not be read: {e}")

    add_redirects(entries)

    with open_archive(upload_path, "uploaded archive") as upload:
        add_upload_entries(entries, upload, report)

    write_archive(entries, out_path)
    report.names = list(entries)
    logger.info(f"Merged archive written: {out_path} ({report.entry_count} entries)")
    return report
