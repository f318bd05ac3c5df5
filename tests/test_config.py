import yaml
import argparse
import pytest
from pathlib import Path
from cachevis.config import SimConfig
from cachevis.core.geometry import FullyAssociative
from cachevis.errors import InvalidConfiguration


def test_config_yaml_loading(tmp_path: Path):
    """Tests that config is loaded correctly from a YAML file."""
    yaml_content = {
        'cache_size_bytes': 512,
        'associativity': 'fully',
        'pattern': 'strided',
    }
    yaml_file = tmp_path / "test.yaml"
    with open(yaml_file, 'w') as f:
        yaml.dump(yaml_content, f)

    args = argparse.Namespace(config=str(yaml_file), block_size_bytes=None, pattern=None)

    config = SimConfig.from_args(args)

    assert config.cache_size_bytes == 512
    assert config.block_size_bytes == 32
    assert config.pattern == 'strided'
    assert isinstance(config.geometry().associativity, FullyAssociative)


def test_config_cli_override(tmp_path: Path):
    """Tests that CLI arguments override YAML settings."""
    yaml_content = {
        'cache_size_bytes': 512,
        'associativity': 2,
        'seed': 9,
    }
    yaml_file = tmp_path / "test.yaml"
    with open(yaml_file, 'w') as f:
        yaml.dump(yaml_content, f)

    args = argparse.Namespace(
        config=str(yaml_file),
        associativity="8",   # Override
        cache_size_bytes=None,
    )

    config = SimConfig.from_args(args)

    assert config.associativity == "8"
    assert config.cache_size_bytes == 512
    assert config.seed == 9
    assert config.geometry().ways == 8


def test_config_missing_file_uses_defaults(caplog):
    args = argparse.Namespace(config="does/not/exist.yaml")
    config = SimConfig.from_args(args)
    assert config.cache_size_bytes == 256
    assert "not found" in caplog.text


def test_yaml_int_associativity_is_normalized(tmp_path: Path):
    yaml_file = tmp_path / "test.yaml"
    yaml_file.write_text("associativity: 2\n")
    config = SimConfig.from_args(argparse.Namespace(config=str(yaml_file)))
    assert config.associativity == "2"


def test_invalid_geometry_from_config():
    config = SimConfig(associativity="3")
    with pytest.raises(InvalidConfiguration):
        config.geometry()


def test_config_defaults():
    config = SimConfig()
    assert config.history_window == 20
    assert config.report_dir == ""
