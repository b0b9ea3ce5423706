import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from ..zenith_api.errors import StoreError
from ..zenith_api.store import MemoryStore
from ..zenith_api.task_operations import TaskService
from .config import get_config, get_data_file_path, get_float_config, get_int_config
from .logger import get_logger
from .store_schema import StoreFileModel

log = get_logger(__name__)


def load_store_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Read and validate a store file; a missing file is an empty store."""
    path = Path(path)
    if not path.exists():
        return {"version": 1, "users": {}}
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise StoreError(f"Could not decode JSON from {path}: {e}") from e
    try:
        return StoreFileModel.model_validate(raw).model_dump()
    except ValidationError as e:
        raise StoreError(f"Malformed store file {path}: {e}") from e


class JsonFileStore(MemoryStore):
    """MemoryStore that rewrites a JSON file after every committed write."""

    def __init__(self, path: Union[str, Path], **kwargs):
        super().__init__(**kwargs)
        self.path = Path(path).expanduser()
        self.load(load_store_file(self.path))
        log.debug("Loaded store from %s", self.path)

    def _persist(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".zenith-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self.dump(), f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


def open_store(path: Optional[Union[str, Path]] = None) -> JsonFileStore:
    return JsonFileStore(
        path or get_data_file_path(),
        max_attempts=get_int_config("ZENITH_TXN_ATTEMPTS", 5),
        retry_delay=get_float_config("ZENITH_TXN_RETRY_DELAY", 0.0),
    )


def open_service(path: Optional[Union[str, Path]] = None, user_id: Optional[str] = None) -> TaskService:
    """Build the TaskService the commands operate on, from configuration."""
    return TaskService(open_store(path), user_id or get_config("ZENITH_USER", "local"))
