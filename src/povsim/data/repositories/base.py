"""Base repository implementation for JSON definition data."""
from __future__ import annotations

import math
from pathlib import Path
from typing import Dict, Generic, TypeVar

from povsim.data import paths
from povsim.data.errors import DataValidationError
from povsim.data.json_loader import load_json

T = TypeVar("T")


class RepositoryBase(Generic[T]):
    """Common caching and loading behavior for repositories."""

    def __init__(self, filename: str, base_path: Path | str | None = None) -> None:
        self._filename = filename
        self._base_path = Path(base_path) if base_path is not None else None
        self._definitions: Dict[str, T] | None = None

    def _get_file_path(self) -> Path:
        definitions_dir = paths.get_definitions_path(self._base_path)
        return definitions_dir / self._filename

    def _load_raw(self) -> object:
        return load_json(self._get_file_path())

    def _build(self, raw: object) -> Dict[str, T]:
        """Convert raw JSON into typed definitions keyed by id."""
        raise NotImplementedError

    def _ensure_loaded(self) -> None:
        if self._definitions is None:
            self._definitions = self._build(self._load_raw())

    def get(self, def_id: str) -> T:
        """Return a definition by id."""
        self._ensure_loaded()
        assert self._definitions is not None
        try:
            return self._definitions[def_id]
        except KeyError as exc:
            raise KeyError(def_id) from exc

    def has(self, def_id: str) -> bool:
        self._ensure_loaded()
        assert self._definitions is not None
        return def_id in self._definitions

    def all(self) -> list[T]:
        """Return all definitions in authoring order."""
        self._ensure_loaded()
        assert self._definitions is not None
        return list(self._definitions.values())

    def ids(self) -> list[str]:
        self._ensure_loaded()
        assert self._definitions is not None
        return list(self._definitions.keys())

    @staticmethod
    def _require_mapping(value: object, context: str) -> dict[str, object]:
        if not isinstance(value, dict):
            raise DataValidationError(f"{context} must be an object/dict.")
        return value

    @staticmethod
    def _require_list(value: object, context: str) -> list[object]:
        if not isinstance(value, list):
            raise DataValidationError(f"{context} must be a list.")
        return value

    @staticmethod
    def _require_str(value: object, context: str) -> str:
        if not isinstance(value, str):
            raise DataValidationError(f"{context} must be a string.")
        return value

    @staticmethod
    def _require_optional_str(value: object, context: str) -> str | None:
        if value is None:
            return None
        if not isinstance(value, str):
            raise DataValidationError(f"{context} must be a string if provided.")
        return value

    @staticmethod
    def _require_bool(value: object, context: str, default: bool = False) -> bool:
        if value is None:
            return default
        if not isinstance(value, bool):
            raise DataValidationError(f"{context} must be a boolean.")
        return value

    @staticmethod
    def _require_number(value: object, context: str) -> int | float:
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise DataValidationError(f"{context} must be a number.")
        return value

    @staticmethod
    def _require_non_negative_number(value: object, context: str) -> int | float:
        number = RepositoryBase._require_number(value, context)
        if number < 0:
            raise DataValidationError(f"{context} must be non-negative.")
        return number

    @staticmethod
    def _require_optional_int(value: object, context: str) -> int | None:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            raise DataValidationError(f"{context} must be an integer.")
        return value
