"""Device Model Repository — loads and caches light model descriptors.

A model descriptor is a JSON file named after the model id (LCT016.json,
LWB006.json, ...) holding the record a genuine bridge reports for that
light, including its `state` capability map:

    {
      "state": {"on": false, "bri": 254, "alert": "none", "reachable": true},
      "type": "Dimmable light",
      "name": "Hue white lamp 1",
      "modelid": "LWB006",
      "manufacturername": "Philips",
      "uniqueid": "00:17:88:01:00:b9:d5:ad-0b",
      "swversion": "5.38.2.19136"
    }

Models are read on first use and cached per repository. A model that
cannot be read falls back to the built-in default (a color lamp), so
registering a light never fails because of the database.
"""

import json
import logging
import os
import threading
from typing import Any, Optional

logger = logging.getLogger("huesim.devicedb")

DEFAULT_MODEL = "default"
DEVICEDB_DIR = os.path.dirname(__file__)
DEFAULT_MODEL_PATH = os.path.join(DEVICEDB_DIR, "default.json")


def clone(value: Any) -> Any:
    """Structurally copy a JSON-shaped value (no shared dicts or lists)."""
    if isinstance(value, dict):
        return {key: clone(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [clone(item) for item in value]
    return value


class ModelLoadError(Exception):
    """A descriptor file could not be read or is not a valid model."""


class DeviceModel:
    """An immutable, named light model template.

    The descriptor data is private; callers always receive fresh clones,
    so a device built from a model can never write back into it.
    """

    __slots__ = ("name", "file_path", "_data")

    def __init__(self, name: str, data: dict, file_path: Optional[str] = None):
        self.name = name
        self.file_path = file_path
        self._data = clone(data)

    def to_dict(self) -> dict:
        """Return a fresh copy of the descriptor, ready to become a device."""
        return clone(self._data)

    @property
    def state(self) -> dict:
        return clone(self._data["state"])

    def get(self, key: str, default: Any = None) -> Any:
        return clone(self._data.get(key, default))

    def __repr__(self):
        return f"DeviceModel({self.name!r})"


class LoadResult:
    """Outcome of reading one descriptor: exactly one of model / error is set."""

    __slots__ = ("model_name", "model", "error")

    def __init__(
        self,
        model_name: str,
        model: Optional[DeviceModel] = None,
        error: Optional[Exception] = None,
    ):
        self.model_name = model_name
        self.model = model
        self.error = error

    @property
    def ok(self) -> bool:
        return self.model is not None


def read_model(name: str, file_path: str) -> DeviceModel:
    """Read and validate a single descriptor. Raises ModelLoadError."""
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ModelLoadError(f"Error loading {file_path}: {e}") from e

    if not isinstance(data, dict):
        raise ModelLoadError(f"{file_path}: descriptor must be a JSON object")
    if not isinstance(data.get("state"), dict):
        raise ModelLoadError(f"{file_path}: missing 'state' object")
    return DeviceModel(name, data, file_path)


class ModelRepository:
    """Resolves model names to cached DeviceModel templates."""

    def __init__(
        self,
        devicedb_dir: Optional[str] = None,
        default_model_path: str = DEFAULT_MODEL_PATH,
    ):
        if devicedb_dir is None:
            devicedb_dir = DEVICEDB_DIR
        self.devicedb_dir = devicedb_dir
        self._lock = threading.Lock()
        # The built-in default must load; a broken package is a startup error
        self._models: dict[str, DeviceModel] = {
            DEFAULT_MODEL: read_model(DEFAULT_MODEL, default_model_path)
        }

    @property
    def default(self) -> DeviceModel:
        return self._models[DEFAULT_MODEL]

    def model_path(self, model_name: str) -> str:
        return os.path.join(self.devicedb_dir, f"{model_name}.json")

    def load(self, model_name: str) -> LoadResult:
        """Read a descriptor from the database directory without caching it."""
        if not model_name or os.sep in model_name or "/" in model_name:
            return LoadResult(
                model_name, error=ModelLoadError(f"Invalid model name: {model_name!r}")
            )
        try:
            model = read_model(model_name, self.model_path(model_name))
        except ModelLoadError as e:
            return LoadResult(model_name, error=e)
        return LoadResult(model_name, model=model)

    def resolve(self, model_name: Optional[str] = None) -> DeviceModel:
        """Return the model for `model_name`, loading it on first use.

        Falls back to the default model (and logs why) when the descriptor
        is missing or malformed.
        """
        if not model_name:
            return self.default

        with self._lock:
            cached = self._models.get(model_name)
            if cached is not None:
                return cached

            result = self.load(model_name)
            if result.ok:
                self._models[model_name] = result.model
                logger.info("Loaded model %s from %s", model_name, result.model.file_path)
                return result.model

        logger.warning("%s. Using default model", result.error)
        return self.default

    def cached_models(self) -> list[str]:
        """Names of all models loaded so far (default included)."""
        with self._lock:
            return list(self._models)
