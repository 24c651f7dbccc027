"""Tests for the file hash cache."""

import json

from impsort.cache import HashCache, content_hash


class TestHashCache:
    """Test cases for HashCache."""

    def test_content_hash(self):
        assert content_hash(b"abc") == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )

    def test_missing_file_starts_empty(self, tmp_path):
        cache = HashCache.load(str(tmp_path / "impsort-cache.json"))
        assert len(cache) == 0
        assert not cache.modified

    def test_store_and_load(self, tmp_path):
        cache_file = str(tmp_path / "cache" / "impsort-cache.json")
        cache = HashCache.load(cache_file)
        cache.update("src/A.java", content_hash(b"a"))
        assert cache.modified
        cache.store()
        assert not cache.modified

        loaded = HashCache.load(cache_file)
        assert loaded.is_unchanged("src/A.java", content_hash(b"a"))
        assert not loaded.is_unchanged("src/A.java", content_hash(b"b"))
        assert not loaded.is_unchanged("src/B.java", content_hash(b"a"))

    def test_malformed_file_starts_empty(self, tmp_path):
        cache_file = tmp_path / "impsort-cache.json"
        cache_file.write_text("{not json", encoding="utf-8")
        assert len(HashCache.load(str(cache_file))) == 0

        cache_file.write_text(json.dumps(["a", "b"]), encoding="utf-8")
        assert len(HashCache.load(str(cache_file))) == 0

    def test_without_file(self):
        cache = HashCache.load(None)
        cache.update("A.java", "x")
        cache.store()
        assert cache.is_unchanged("A.java", "x")

    def test_key_for(self, tmp_path):
        path = tmp_path / "src" / "A.java"
        assert HashCache.key_for(path, tmp_path) == "src/A.java"
        assert HashCache.key_for(path, tmp_path / "other") == path.as_posix()
