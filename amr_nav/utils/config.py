"""Config loading helpers built around OmegaConf."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional, Sequence

from omegaconf import OmegaConf

from amr_nav.config import SimConfig


def load_config_any(path: str) -> Any:
    """Load a YAML/OMEGACONF file and return the resolved Python object."""
    return OmegaConf.to_container(OmegaConf.load(path), resolve=True)


def load_config_dict(path: str) -> Dict[str, Any]:
    """Load a config file and guarantee a `dict` result."""
    cfg = load_config_any(path)
    if not isinstance(cfg, dict):
        raise TypeError(f"Expected mapping at {path}, got {type(cfg)}")
    return cfg


def load_sim_config(
    path: Optional[str] = None, overrides: Optional[Sequence[str]] = None
) -> SimConfig:
    """Merge defaults, an optional YAML file and `key=value` overrides into a SimConfig."""
    merged = OmegaConf.create(asdict(SimConfig()))
    if path is not None:
        merged = OmegaConf.merge(merged, OmegaConf.create(load_config_dict(path)))
    if overrides:
        merged = OmegaConf.merge(merged, OmegaConf.from_dotlist(list(overrides)))
    return SimConfig.from_dict(OmegaConf.to_container(merged, resolve=True))
