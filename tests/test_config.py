from pathlib import Path

import pytest

from amr_nav.config import SimConfig
from amr_nav.utils.config import load_config_dict, load_sim_config

DEFAULT_YAML = Path(__file__).resolve().parent.parent / "configs" / "default.yaml"


def test_default_yaml_matches_dataclass_defaults() -> None:
    cfg = load_sim_config(str(DEFAULT_YAML))
    assert cfg == SimConfig()


def test_dotlist_overrides() -> None:
    cfg = load_sim_config(None, ["sensor.ray_count=90", "robot.speed=2.0", "seed=3"])
    assert cfg.sensor.ray_count == 90
    assert cfg.robot.speed == 2.0
    assert cfg.seed == 3
    assert cfg.map_size == (200, 150)


def test_non_mapping_yaml_rejected(tmp_path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(TypeError):
        load_config_dict(str(path))
