"""
Frame Repository - Data access layer for the frame service

Everything lives as files under one data directory:

    data/index.json           photo index
    data/settings.json        rotation settings
    data/battery.json         last battery report
    data/playlist/<id>        playlist records
    data/images/<file>        raw JPEG blobs

Every write goes to a temp file in the target directory, is fsync'ed and then
renamed over the destination, so readers see either the old or the new
value and never a partial one.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .models import Battery, IndexFile, Playlist, Settings
from .protocols import ImageFileNotFoundError, StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_TMP_PREFIX = "."
_TMP_SUFFIX = ".tmp"


class AtomicFileStore:
    """Key/value persistence with crash-safe writes"""

    def __init__(self, data_dir: str):
        self.root = Path(data_dir)
        self.images_dir = self.root / "images"
        self.playlist_dir = self.root / "playlist"

    def ensure_dirs(self) -> None:
        """Create the data directories (idempotent)"""
        for directory in (self.root, self.images_dir, self.playlist_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def key_path(self, key: str) -> Path:
        """
        Map a storage key to its file.

        Plain keys become ``<key>.json`` in the data root; namespaced keys
        (``playlist/<id>``) become extension-less files in a subdirectory.
        """
        parts = key.split("/")
        if not key or any(part in ("", ".", "..") or "\\" in part or "\0" in part for part in parts):
            raise ValueError(f"Invalid storage key: {key!r}")
        if len(parts) == 1:
            return self.root / f"{key}.json"
        return self.root.joinpath(*parts)

    # ==================== Structured values ====================

    def exists(self, key: str) -> bool:
        return self.key_path(key).is_file()

    def load(self, key: str, model: Type[T], default: Callable[[], Optional[T]]) -> Optional[T]:
        """
        Read and validate a stored value.

        A missing file yields ``default()``; an unreadable or invalid one is
        logged and also yields ``default()``.
        """
        path = self.key_path(key)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return default()
        except OSError as e:
            logger.warning(f"Could not read {path}: {e}")
            return default()

        try:
            return model.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding corrupt value at {path}: {e.error_count()} validation error(s)")
            return default()

    def save(self, key: str, value: BaseModel) -> None:
        """Serialize ``value`` as pretty-printed camelCase JSON and write it atomically"""
        payload = json.dumps(
            value.model_dump(mode="json", by_alias=True),
            indent=2,
            ensure_ascii=False,
        )
        self._atomic_write(self.key_path(key), payload.encode("utf-8"))

    # ==================== Image blobs ====================

    def list_image_files(self) -> List[str]:
        """Sorted names of stored blobs (temp files excluded)"""
        self.ensure_dirs()
        return sorted(
            entry.name
            for entry in self.images_dir.iterdir()
            if entry.is_file() and not entry.name.startswith(_TMP_PREFIX)
        )

    def delete_all_image_files(self) -> int:
        """Remove every stored blob and return how many were removed"""
        names = self.list_image_files()
        for name in names:
            (self.images_dir / name).unlink(missing_ok=True)
        return len(names)

    def write_image_file(self, name: str, contents: bytes) -> None:
        self._atomic_write(self.images_dir / name, contents)

    def read_image_file(self, name: str) -> bytes:
        try:
            return (self.images_dir / name).read_bytes()
        except (FileNotFoundError, IsADirectoryError):
            raise ImageFileNotFoundError(name) from None

    def image_file_exists(self, name: str) -> bool:
        return (self.images_dir / name).is_file()

    # ==================== Internals ====================

    def _atomic_write(self, path: Path, data: bytes) -> None:
        dirpath = path.parent
        try:
            dirpath.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=_TMP_PREFIX, suffix=_TMP_SUFFIX, dir=dirpath)
        except OSError as e:
            raise StorageError(str(path), str(e)) from e

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except OSError as e:
            logger.error(f"Atomic write to {path} failed: {e}")
            raise StorageError(str(path), str(e)) from e
        finally:
            if os.path.exists(tmp):
                os.unlink(tmp)


class FrameRepository:
    """Frame repository - typed access to the index, settings, playlists and blobs"""

    def __init__(self, store: AtomicFileStore):
        self.store = store
        self.store.ensure_dirs()

    # ==================== Index ====================

    async def load_index(self) -> IndexFile:
        return self._load_or_bootstrap("index", IndexFile)

    async def save_index(self, index: IndexFile) -> None:
        self.store.ensure_dirs()
        self.store.save("index", index)

    # ==================== Settings ====================

    async def load_settings(self) -> Settings:
        return self._load_or_bootstrap("settings", Settings)

    async def save_settings(self, settings: Settings) -> None:
        self.store.ensure_dirs()
        self.store.save("settings", settings)

    # ==================== Playlists ====================

    async def get_playlist(self, playlist_id: str) -> Optional[Playlist]:
        return self.store.load(f"playlist/{playlist_id}", Playlist, lambda: None)

    async def save_playlist(self, playlist: Playlist) -> None:
        self.store.ensure_dirs()
        self.store.save(f"playlist/{playlist.id}", playlist)

    # ==================== Battery ====================

    async def get_battery(self) -> Optional[Battery]:
        return self.store.load("battery", Battery, lambda: None)

    async def save_battery(self, battery: Battery) -> None:
        self.store.ensure_dirs()
        self.store.save("battery", battery)

    # ==================== Images ====================

    async def write_image(self, file_name: str, contents: bytes) -> None:
        self.store.ensure_dirs()
        self.store.write_image_file(file_name, contents)

    async def read_image(self, file_name: str) -> bytes:
        return self.store.read_image_file(file_name)

    async def image_exists(self, file_name: str) -> bool:
        return self.store.image_file_exists(file_name)

    async def list_image_files(self) -> List[str]:
        return self.store.list_image_files()

    async def delete_all_images(self) -> int:
        return self.store.delete_all_image_files()

    def _load_or_bootstrap(self, key: str, model: Type[T]) -> T:
        """Load a singleton, persisting the defaults when it is missing or corrupt"""
        self.store.ensure_dirs()
        missing = []

        def default() -> T:
            missing.append(key)
            return model()

        value = self.store.load(key, model, default)
        if missing:
            logger.info(f"Initializing {key} with defaults")
            self.store.save(key, value)
        return value


__all__ = ["AtomicFileStore", "FrameRepository"]
