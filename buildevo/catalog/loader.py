from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from loguru import logger
from pydantic import ValidationError as PydanticValidationError
import yaml

from buildevo.catalog.models import GameCatalog
from buildevo.exceptions import ConfigurationError

DATA_DIR = Path(__file__).parent / "data"
CATALOG_FILES = ("races.yaml", "classes.yaml", "bonuses.yaml", "build_types.yaml")


def read_catalog_data(data_dir: Path) -> dict:
    """Merge the top-level sections of every catalog file into one mapping."""
    merged: dict = {}
    for name in CATALOG_FILES:
        path = data_dir / name
        if not path.exists():
            raise ConfigurationError(f"Missing catalog file: {path}")
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ConfigurationError(f"{name} must be a mapping")
        overlap = merged.keys() & data.keys()
        if overlap:
            raise ConfigurationError(f"{name} redefines sections: {sorted(overlap)}")
        merged.update(data)
    return merged


def load_catalog_from(data_dir: Path) -> GameCatalog:
    try:
        catalog = GameCatalog.model_validate(read_catalog_data(data_dir))
    except PydanticValidationError as exc:
        raise ConfigurationError(f"Invalid catalog data in {data_dir}: {exc}") from exc
    logger.debug(
        "[GameCatalog] Loaded | subraces={}, classes={}, build_types={}",
        len(catalog.subraces),
        len(catalog.classes),
        len(catalog.build_types),
    )
    return catalog


@lru_cache(maxsize=1)
def load_catalog() -> GameCatalog:
    """The packaged catalog, parsed once per process."""
    return load_catalog_from(DATA_DIR)
