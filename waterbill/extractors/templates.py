# waterbill/extractors/templates.py
from __future__ import annotations
import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

from .errors import TemplateMissing

logger = logging.getLogger(__name__)

ADDRESS_FIELD = "Address"


@dataclass(frozen=True)
class FieldBox:
    name: str
    x: int
    y: int
    w: int
    h: int


@dataclass(frozen=True)
class Template:
    """Field boxes of one region, in canonical canvas coordinates."""
    region: str
    fields: Mapping[str, FieldBox]

    @property
    def address(self) -> Optional[FieldBox]:
        return self.fields.get(ADDRESS_FIELD)

    def value_fields(self) -> List[FieldBox]:
        return [b for name, b in self.fields.items() if name != ADDRESS_FIELD]

    def __len__(self) -> int:
        return len(self.fields)


def _region_key(region: Any) -> str:
    return str(getattr(region, "value", region))


def _parse_box(name: str, raw: Any) -> FieldBox:
    if not isinstance(raw, dict):
        raise TemplateMissing(f"field {name!r}: expected an object with x, y, w, h")
    try:
        return FieldBox(name, int(raw["x"]), int(raw["y"]), int(raw["w"]), int(raw["h"]))
    except (KeyError, TypeError, ValueError) as e:
        raise TemplateMissing(f"field {name!r}: bad coordinates ({e})") from e


def parse_template(region: str, data: Any) -> Template:
    if not isinstance(data, dict):
        raise TemplateMissing(f"template for {region} is not a JSON object")
    boxes: Dict[str, FieldBox] = {name: _parse_box(name, raw) for name, raw in data.items()}
    return Template(region, MappingProxyType(boxes))


class TemplateStore:
    """
    Region name -> Template, read from `<root>/<region lower-cased>.json`.
    Loaded templates are cached and never mutated, so one store can be shared
    by concurrent documents.
    """

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self._cache: Dict[str, Template] = {}
        self._lock = threading.Lock()

    def path_for(self, region: Any) -> Path:
        return self.root / f"{_region_key(region).lower()}.json"

    def load(self, region: Any) -> Template:
        key = _region_key(region)
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached

        path = self.path_for(key)
        if not path.exists():
            self._write_stub(path)
            raise TemplateMissing(f"no template for region {key} (stub created at {path})")

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise TemplateMissing(f"cannot read template {path}: {e}") from e

        tpl = parse_template(key, data)
        if not len(tpl):
            raise TemplateMissing(f"template for region {key} defines no fields ({path})")

        with self._lock:
            self._cache[key] = tpl
        return tpl

    @staticmethod
    def _write_stub(path: Path) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps({}, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning("could not create template stub %s: %s", path, e)
