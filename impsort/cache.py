"""
Per-file content hash cache.

Remembers the hash of each file as it was last left by a successful run, so
unchanged files can be counted as sorted without being parsed again. Stored
as JSON mapping base-directory-relative paths to SHA-256 hex digests.
"""

import hashlib
import json
import logging
import os
import threading
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


def content_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class HashCache:
    """Thread-safe mapping of file keys to content hashes, backed by a JSON file."""

    def __init__(self, cache_file: Optional[str] = None):
        self.cache_file = cache_file
        self._hashes: Dict[str, str] = {}
        self._lock = threading.Lock()
        self.modified = False

    @classmethod
    def load(cls, cache_file: Optional[str]) -> "HashCache":
        """
        Read the cache file, starting empty when it is absent or unusable.

        Args:
            cache_file: Path of the JSON file; None disables persistence
        """
        cache = cls(cache_file)
        if not cache_file:
            return cache

        cache_dir = os.path.dirname(cache_file)
        if cache_dir and not os.path.isdir(cache_dir):
            if os.path.exists(cache_dir):
                logger.warning(f"Cache directory '{cache_dir}' is not a directory")
            return cache
        if not os.path.exists(cache_file):
            return cache

        try:
            with open(cache_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Cannot load file hash cache {cache_file}: {e}")
            return cache
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed file hash cache {cache_file}")
            return cache

        cache._hashes = {str(k): str(v) for k, v in data.items()}
        logger.debug(f"Loaded {len(cache)} cached hashes from {cache_file}")
        return cache

    @staticmethod
    def key_for(path, base_dir) -> str:
        """Cache key of ``path``: relative to ``base_dir`` when inside it."""
        path = Path(path).absolute()
        try:
            return path.relative_to(Path(base_dir).absolute()).as_posix()
        except ValueError:
            return path.as_posix()

    def is_unchanged(self, key: str, digest: str) -> bool:
        with self._lock:
            return self._hashes.get(key) == digest

    def update(self, key: str, digest: str) -> None:
        with self._lock:
            self._hashes[key] = digest
            self.modified = True

    def __len__(self) -> int:
        return len(self._hashes)

    def store(self) -> None:
        """Write the cache file; failures are logged, not raised."""
        if not self.cache_file:
            return
        try:
            cache_dir = os.path.dirname(self.cache_file)
            if cache_dir:
                os.makedirs(cache_dir, exist_ok=True)
            with open(self.cache_file, 'w', encoding='utf-8') as f:
                json.dump(self._hashes, f, indent=2, sort_keys=True)
        except OSError as e:
            logger.warning(f"Cannot store file hash cache {self.cache_file}: {e}")
            return
        self.modified = False
        logger.debug(f"Stored {len(self)} hashes in {self.cache_file}")
