# config_manager.py - per-group tunables with explicit default resolution

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional

from ghost_complete.utils.logger_utils import Log


@dataclass(frozen=True)
class GroupConfig:
    """
    Tunables for one group. Every field always has a value: a group that was
    never configured resolves to exactly these defaults.
    Delays are in seconds. `debounce_delay` and `classes` are not read by the
    engine; they are carried for the UI layer that renders suggestions.
    """
    max_words: int = 300
    max_patterns: int = 100
    max_suggestions: int = 5
    max_stable: int = 10
    max_total: int = 15
    debounce_delay: float = 0.16
    storage_sync_delay: float = 0.6
    idle_cleanup_delay: float = 2.0
    min_word_length: int = 3
    stable_words: Optional[int] = None  # eviction ceiling; None -> 80% of max_words
    recency_floor: float = 0.1
    decay_window: float = 7 * 24 * 3600.0
    classes: Dict[str, str] = field(default_factory=dict)

    def eviction_ceiling(self) -> int:
        """How many words survive an eviction pass (never above max_words)."""
        target = self.stable_words if self.stable_words is not None else int(self.max_words * 0.8)
        return max(1, min(self.max_words, target))

    def as_dict(self) -> Dict[str, Any]:
        out = {f.name: getattr(self, f.name) for f in fields(self)}
        out["classes"] = dict(self.classes)
        return out


_FIELDS = {f.name: f for f in fields(GroupConfig)}
_INT_FIELDS = {"max_words", "max_patterns", "max_suggestions", "max_stable",
               "max_total", "min_word_length", "stable_words"}
_FLOAT_FIELDS = {"debounce_delay", "storage_sync_delay", "idle_cleanup_delay",
                 "recency_floor", "decay_window"}


def _field_name(key: str) -> str:
    # accepts "MAX_WORDS", "max_words" and "max-words"
    return str(key).strip().lower().replace("-", "_")


def _coerce(name: str, value: Any) -> Any:
    """Convert a raw value to the field's type; raises ValueError/TypeError when it can't."""
    if name == "stable_words" and value is None:
        return None
    if name in _INT_FIELDS:
        if isinstance(value, bool):
            raise TypeError(f"{name} expects an integer")
        v = int(value)
        return max(1, v)
    if name in _FLOAT_FIELDS:
        if isinstance(value, bool):
            raise TypeError(f"{name} expects a number")
        v = float(value)
        if v < 0:
            raise ValueError(f"{name} must be >= 0")
        return v
    if name == "classes":
        if not isinstance(value, Mapping):
            raise TypeError("classes expects a mapping")
        return {str(k): str(v) for k, v in value.items()}
    raise KeyError(name)


def clean_params(params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Keep only known, well-typed keys (snake_case names); warn about the rest."""
    out: Dict[str, Any] = {}
    for key, value in (params or {}).items():
        name = _field_name(key)
        if name not in _FIELDS:
            Log.warning(f"[Config] no such option: {key}")
            continue
        try:
            out[name] = _coerce(name, value)
        except (TypeError, ValueError) as e:
            Log.warning(f"[Config] ignoring {key}={value!r}: {e}")
    return out


class ConfigRegistry:
    """
    Holds per-group overrides on top of one default GroupConfig.
    resolve(group) merges the group's overrides onto the defaults and always
    returns a complete GroupConfig; reading an unconfigured group never fails.
    """

    def __init__(self, defaults: Optional[GroupConfig] = None):
        self.defaults = defaults or GroupConfig()
        self._overrides: Dict[str, Dict[str, Any]] = {}

    # Resolution -----------------------------------------------------------
    def resolve(self, group: str = "") -> GroupConfig:
        over = self._overrides.get(group or "")
        if not over:
            return self.defaults
        merged = dict(over)
        if "classes" in merged:
            merged["classes"] = {**self.defaults.classes, **merged["classes"]}
        return replace(self.defaults, **merged)

    get_group_config = resolve

    def groups(self):
        return sorted(self._overrides)

    # Updates --------------------------------------------------------------
    def set_group_config(self, group: str = "", params: Optional[Mapping[str, Any]] = None,
                         classes: Optional[Mapping[str, str]] = None) -> GroupConfig:
        """Merge `params` (and UI `classes`) into the group's overrides."""
        group = group or ""
        over = self._overrides.setdefault(group, {})
        over_classes = dict(over.get("classes", {}))
        cleaned = clean_params(params)
        if "classes" in cleaned:
            over_classes.update(cleaned.pop("classes"))
        over.update(cleaned)
        if classes:
            over_classes.update(clean_params({"classes": classes}).get("classes", {}))
        if over_classes:
            over["classes"] = over_classes
        return self.resolve(group)

    def apply_json(self, group: str, raw: Optional[str],
                   raw_classes: Optional[str] = None) -> GroupConfig:
        """Apply JSON-encoded params/classes strings; malformed JSON is ignored."""
        params = _parse_json_object(raw)
        classes = _parse_json_object(raw_classes)
        if params or classes:
            return self.set_group_config(group, params, classes)
        return self.resolve(group)

    def reset(self, group: Optional[str] = None) -> None:
        if group is None:
            self._overrides.clear()
        else:
            self._overrides.pop(group or "", None)

    # File persistence -----------------------------------------------------
    def load(self, path: str) -> None:
        """
        Read {"default": {...}, "groups": {name: {...}}}.
        A missing or unreadable file leaves the registry unchanged.
        """
        if not os.path.exists(path):
            return
        try:
            with open(path, "r", encoding="utf8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            Log.warning(f"[Config] load failed for {path}: {e}")
            return
        if not isinstance(data, dict):
            Log.warning(f"[Config] {path} does not hold a JSON object")
            return

        base = data.get("default")
        if isinstance(base, dict):
            self.defaults = replace(self.defaults, **clean_params(base))
        groups = data.get("groups")
        if isinstance(groups, dict):
            for name, params in groups.items():
                if isinstance(params, dict):
                    self.set_group_config(str(name), params)

    def save(self, path: str) -> None:
        folder = os.path.dirname(path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        data = {
            "default": self.defaults.as_dict(),
            "groups": {g: dict(o) for g, o in sorted(self._overrides.items())},
        }
        with open(path, "w", encoding="utf8") as f:
            json.dump(data, f, indent=2, sort_keys=True)


def _parse_json_object(raw: Optional[str]) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        val = json.loads(raw)
    except ValueError:
        return {}
    return val if isinstance(val, dict) else {}
