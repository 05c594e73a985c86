"""Tests for merging the app shell, the routing rule and the upload."""

import zipfile

import pytest

from netlify_deploy_api.src.archive import (
    REDIRECTS_PATH,
    REDIRECTS_RULE,
    MergeReport,
    add_upload_entries,
    merge_archives,
)
from netlify_deploy_api.src.errors import InvalidArchiveError

from conftest import build_zip, read_zip


@pytest.fixture
def upload_archive(tmp_path):
    path = tmp_path / "data.zip"
    path.write_bytes(build_zip(
        {
            "data/config.json": '{"title": "Quiz"}',
            "data/data.json": '[{"q": "2+2", "a": "4"}]',
        },
        dirs=["data/"],
    ))
    return path


def test_merge_scenario_five_entries(tmp_path, base_archive, upload_archive):
    out = tmp_path / "merged.zip"
    report = merge_archives(base_archive, upload_archive, out)

    entries = read_zip(out.read_bytes())
    assert sorted(entries) == sorted([
        "index.html", "app.js", "_redirects", "data/config.json", "data/data.json",
    ])
    assert report.entry_count == 5
    assert report.names == ["index.html", "app.js", "_redirects", "data/config.json", "data/data.json"]
    assert entries["_redirects"] == b"/* /index.html 200"
    assert entries["data/data.json"] == b'[{"q": "2+2", "a": "4"}]'
    assert report.overridden == []
    assert report.skipped == []


def test_base_bytes_preserved(tmp_path, base_archive, upload_archive):
    out = tmp_path / "merged.zip"
    merge_archives(base_archive, upload_archive, out)

    merged = read_zip(out.read_bytes())
    base = read_zip(base_archive.read_bytes())
    for name, data in base.items():
        assert merged[name] == data


def test_upload_overrides_base_entry(tmp_path, base_archive):
    upload = tmp_path / "data.zip"
    upload.write_bytes(build_zip({"index.html": "<h1>custom</h1>"}))
    out = tmp_path / "merged.zip"

    report = merge_archives(base_archive, upload, out)

    with zipfile.ZipFile(out) as zf:
        names = zf.namelist()
        assert names.count("index.html") == 1
        assert zf.read("index.html") == b"<h1>custom</h1>"
    assert report.overridden == ["index.html"]


def test_upload_can_override_redirects(tmp_path, base_archive):
    upload = tmp_path / "data.zip"
    upload.write_bytes(build_zip({REDIRECTS_PATH: "/api/* https://example.com/:splat 200"}))
    out = tmp_path / "merged.zip"

    merge_archives(base_archive, upload, out)

    assert read_zip(out.read_bytes())[REDIRECTS_PATH] == b"/api/* https://example.com/:splat 200"


def test_directory_entries_not_copied(tmp_path, base_archive):
    upload = tmp_path / "data.zip"
    upload.write_bytes(build_zip({"assets/img/logo.svg": "<svg/>"}, dirs=["assets/", "assets/img/"]))
    out = tmp_path / "merged.zip"

    merge_archives(base_archive, upload, out)

    names = list(read_zip(out.read_bytes()))
    assert "assets/img/logo.svg" in names
    assert "assets/" not in names
    assert "assets/img/" not in names


def test_redirects_rule_without_upload_entries(tmp_path, base_archive):
    upload = tmp_path / "empty.zip"
    upload.write_bytes(build_zip({}))
    out = tmp_path / "merged.zip"

    report = merge_archives(base_archive, upload, out)

    assert report.names == ["index.html", "app.js", REDIRECTS_PATH]
    assert read_zip(out.read_bytes())[REDIRECTS_PATH].decode() == REDIRECTS_RULE


def test_invalid_upload_raises(tmp_path, base_archive):
    upload = tmp_path / "data.zip"
    upload.write_bytes(b"this is not a zip file")

    with pytest.raises(InvalidArchiveError, match="uploaded archive"):
        merge_archives(base_archive, upload, tmp_path / "merged.zip")
    assert not (tmp_path / "merged.zip").exists()


def test_invalid_base_raises(tmp_path, upload_archive):
    base = tmp_path / "broken.zip"
    base.write_bytes(b"PK\x03\x04 truncated")

    with pytest.raises(InvalidArchiveError, match="base archive"):
        merge_archives(base, upload_archive, tmp_path / "merged.zip")


class _Info:
    def __init__(self, filename, is_dir=False):
        self.filename = filename
        self.date_time = (2024, 1, 1, 0, 0, 0)
        self._is_dir = is_dir

    def is_dir(self):
        return self._is_dir


class _FlakyZip:
    """Stands in for a ZipFile whose 'bad.bin' entry fails its CRC check."""

    def infolist(self):
        return [_Info("good.txt"), _Info("bad.bin"), _Info("sub/", is_dir=True)]

    def read(self, info):
        if info.filename == "bad.bin":
            raise zipfile.BadZipFile("Bad CRC-32 for file 'bad.bin'")
        return b"ok"


def test_unreadable_upload_entry_skipped(tmp_path):
    entries = {}
    report = MergeReport(path=tmp_path / "merged.zip")

    add_upload_entries(entries, _FlakyZip(), report)

    assert list(entries) == ["good.txt"]
    assert report.skipped == ["bad.bin"]
