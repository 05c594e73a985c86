"""
Naming conventions for Netlify sites and local scratch files.
"""

import re
import time
import uuid
from pathlib import Path


def sanitize_name(name: str) -> str:
    """Sanitize for Netlify subdomains: lowercase, alphanumeric + hyphens."""
    name = name.lower()
    name = re.sub(r'[^a-z0-9-]', '-', name)
    name = re.sub(r'-+', '-', name)
    return name.strip('-')


def create_site_name(prefix: str) -> str:
    """Site name: {prefix}-{epoch_ms}"""
    stamp = int(time.time() * 1000)
    prefix = sanitize_name(prefix)
    return f"{prefix}-{stamp}" if prefix else f"site-{stamp}"


def merged_archive_path(work_dir) -> Path:
    """Temp archive: {work_dir}/dist_with_data_{epoch_ns}_{rand8}.zip"""
    return Path(work_dir) / f"dist_with_data_{time.time_ns()}_{uuid.uuid4().hex[:8]}.zip"


def upload_path(upload_dir, filename: str = None) -> Path:
    """Saved upload: {upload_dir}/upload_{epoch_ns}_{rand8}_{safe filename}"""
    stem = sanitize_name(Path(filename).stem) if filename else ""
    suffix = f"_{stem}" if stem else ""
    return Path(upload_dir) / f"upload_{time.time_ns()}_{uuid.uuid4().hex[:8]}{suffix}.zip"
