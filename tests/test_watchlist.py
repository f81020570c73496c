"""Tests for watchlist persistence."""

import json
import sys
from pathlib import Path

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prneko.errors import StorageError
from prneko.watchlist import JsonFileWatchlistStorage, MemoryWatchlistStorage, Watchlist

URL = "https://github.com/acme/app/pull/1"


def test_add_then_remove_round_trip(tmp_path):
    """Verify an added URL is persisted and removing it deletes it."""
    path = tmp_path / "nested" / "watchlist.json"
    watchlist = Watchlist(JsonFileWatchlistStorage(path))

    assert watchlist.add(URL) is True
    assert JsonFileWatchlistStorage(path).load() == [URL]
    assert watchlist.urls() == [URL]

    assert watchlist.remove(URL) is True
    assert JsonFileWatchlistStorage(path).load() == []
    assert watchlist.urls() == []


def test_add_is_set_like_and_trims_whitespace():
    """Verify duplicate adds are ignored after trimming."""
    storage = MemoryWatchlistStorage()
    watchlist = Watchlist(storage)

    assert watchlist.add(f"  {URL}\n") is True
    assert watchlist.add(URL) is False

    assert storage.load() == [URL]


def test_urls_keep_insertion_order():
    """Verify the watchlist preserves the order URLs were added in."""
    watchlist = Watchlist(MemoryWatchlistStorage())
    urls = [f"https://github.com/acme/app/pull/{n}" for n in (3, 1, 2)]
    for url in urls:
        watchlist.add(url)

    assert watchlist.urls() == urls


def test_keys_are_exact_strings():
    """Verify URLs differing beyond whitespace are distinct entries."""
    watchlist = Watchlist(MemoryWatchlistStorage())
    watchlist.add(URL)
    watchlist.add(URL + "/")

    assert watchlist.urls() == [URL, URL + "/"]


def test_remove_missing_url_is_noop():
    """Verify removing an unknown URL leaves storage untouched."""
    storage = MemoryWatchlistStorage([URL])
    watchlist = Watchlist(storage)

    assert watchlist.remove("https://github.com/acme/app/pull/9") is False
    assert storage.load() == [URL]


def test_missing_file_loads_empty(tmp_path):
    """Verify a missing watchlist file is treated as empty."""
    assert JsonFileWatchlistStorage(tmp_path / "missing.json").load() == []


def test_save_writes_json_array(tmp_path):
    """Verify the file holds a plain JSON array of URLs."""
    path = tmp_path / "watchlist.json"
    JsonFileWatchlistStorage(path).save([URL])

    assert json.loads(path.read_text(encoding="utf-8")) == [URL]
    assert not (tmp_path / "watchlist.json.tmp").exists()


@pytest.mark.parametrize("content", ["{not json", '{"url": 1}', "[1, 2]"])
def test_invalid_file_raises_storage_error(tmp_path, content):
    """Verify unreadable watchlist files raise StorageError."""
    path = tmp_path / "watchlist.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(StorageError):
        JsonFileWatchlistStorage(path).load()
