from __future__ import annotations

from typing import Any, Callable, Dict


_LAYERS: Dict[str, Any] = {}


def register_layer(name: str) -> Callable[[Any], Any]:
    def deco(fn: Any) -> Any:
        _LAYERS[name.lower()] = fn
        return fn
    return deco


def get_layer(name: str) -> Any:
    try:
        return _LAYERS[name.lower()]
    except KeyError:
        raise KeyError(f"Unknown layer kind {name!r}; registered: {sorted(_LAYERS)}") from None


def list_layers() -> Dict[str, Any]:
    return dict(_LAYERS)
