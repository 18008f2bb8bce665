import pytest

from abl2tikz.config import ConversionConfig, get_default_config, set_default_config


def test_defaults():
    config = ConversionConfig()
    assert config.scale == 2.54
    assert config.world_snap_radius == pytest.approx(2.54)
    assert ConversionConfig(snap_radius=None).world_snap_radius is None


@pytest.mark.parametrize("kwargs", [{"scale": 0}, {"scale": -1.0}, {"snap_radius": -0.1}])
def test_invalid_values(kwargs):
    with pytest.raises(ValueError):
        ConversionConfig(**kwargs)


def test_default_config_roundtrip():
    original = get_default_config()
    try:
        set_default_config(ConversionConfig(scale=1.0, snap_radius=0.5))
        assert get_default_config().scale == 1.0
        assert get_default_config().snap_radius == 0.5
    finally:
        set_default_config(original)
    assert get_default_config() == original
