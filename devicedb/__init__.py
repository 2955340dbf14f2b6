"""Light model descriptors and the repository that loads them."""

from .loader import DeviceModel, LoadResult, ModelLoadError, ModelRepository, clone

__all__ = ["DeviceModel", "LoadResult", "ModelLoadError", "ModelRepository", "clone"]
