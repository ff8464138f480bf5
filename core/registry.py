import copy
import logging
import tomllib
from importlib import import_module
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.types import HealthModule

logger = logging.getLogger(__name__)

DEFAULTS: Dict[str, Any] = {
    "app": {"title": "Thyroid Risk Screening"},
    "storage": {"path": "data/patients.json"},
    "logging": {"level": "INFO"},
    "modules": {"thyroid": {"enabled": True, "order": 1}},
}


def load_config(path: str | Path = "config.toml") -> Dict[str, Any]:
    """Read config.toml over the defaults. A missing file means defaults only."""
    cfg = copy.deepcopy(DEFAULTS)
    p = Path(path)
    if not p.exists():
        logger.info("No config at %s, using defaults", p)
        return cfg
    with open(p, "rb") as f:
        loaded = tomllib.load(f)
    for section, values in loaded.items():
        if isinstance(values, dict) and isinstance(cfg.get(section), dict):
            if section == "modules":
                # module list is replaced, not merged
                cfg[section] = values
            else:
                cfg[section].update(values)
        else:
            cfg[section] = values
    return cfg


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def load_enabled_modules(cfg: Optional[Dict[str, Any]] = None) -> List[HealthModule]:
    cfg = cfg if cfg is not None else load_config()
    mods = []
    mod_cfg = cfg.get("modules", {})
    ordered = sorted(((m, v.get("order", 999)) for m, v in mod_cfg.items() if v.get("enabled", True)), key=lambda x: x[1])
    for name, _ in ordered:
        mod = import_module(f"modules.{name}.{name}")
        logger.debug("Loaded module %s", name)
        mods.append(mod)
    return mods
