from __future__ import annotations

import importlib
import pkgutil
from pathlib import Path
from typing import Dict, Optional, Type

from .parser import TextParser

AUTO = "auto"
FALLBACK_PARSER = "text"


def _discover_package_classes(pkg, base_cls) -> Dict[str, Type]:
    discovered: Dict[str, Type] = {}
    for m in pkgutil.iter_modules(pkg.__path__, pkg.__name__ + "."):
        module = importlib.import_module(m.name)
        for attr_name in dir(module):
            obj = getattr(module, attr_name)
            if isinstance(obj, type) and issubclass(obj, base_cls) and obj is not base_cls:
                name = getattr(obj, "NAME", obj.__name__).lower()
                discovered[name] = obj
    return discovered


def discover_parsers() -> Dict[str, Type[TextParser]]:
    from .. import parsers as parsers_pkg  # lazy import
    return _discover_package_classes(parsers_pkg, TextParser)


def choose_parser(parsers: Dict[str, Type[TextParser]], path: Path) -> Type[TextParser]:
    ext = path.suffix.lower().lstrip(".")
    for cls in parsers.values():
        if ext in cls.SUPPORTED_EXTENSIONS:
            return cls
    return parsers.get(FALLBACK_PARSER, TextParser)


def select_parser(parsers: Dict[str, Type[TextParser]], selector: str) -> Optional[Type[TextParser]]:
    selector = (selector or "").strip().lower()
    return parsers.get(selector)
