from __future__ import annotations

from buildevo.catalog.loader import load_catalog, load_catalog_from
from buildevo.catalog.models import BuildTypeProfile, GameCatalog, StatThreshold
