from __future__ import annotations
from dataclasses import dataclass
import yaml
from pathlib import Path
from .core.geometry import Geometry, make_geometry
from .utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SimConfig:
    """Cache visualizer configuration"""
    # Cache geometry
    cache_size_bytes: int = 256
    block_size_bytes: int = 32
    associativity: str = "4"  # number of ways or "fully"
    address_bits: int = 32

    # Workload
    pattern: str = "sequential"  # sequential, random, strided, repeated
    length: int | None = None    # None = pattern default
    max_addr: int = 1024
    word_size: int = 4
    stride_multiplier: int = 8
    repeat_pool_size: int = 8
    seed: int | None = None

    # Config file
    config_file: str = ""

    # Reporting
    report_dir: str = ""  # empty = no report files
    history_window: int = 20
    delay_ms: int = 0

    def __post_init__(self):
        # YAML may hand us an int for associativity
        self.associativity = str(self.associativity)

    def geometry(self) -> Geometry:
        """Builds the Geometry for this configuration (raises InvalidConfiguration)."""
        return make_geometry(self.cache_size_bytes, self.block_size_bytes,
                             self.associativity, self.address_bits)

    def update_from_yaml(self, yaml_path: str):
        """Updates config fields from a YAML file."""
        with open(yaml_path, 'r') as f:
            yaml_config = yaml.safe_load(f) or {}
        for key, value in yaml_config.items():
            if hasattr(self, key):
                setattr(self, key, value)
            else:
                logger.warning("Ignoring unknown config key '%s' in %s", key, yaml_path)

    @classmethod
    def from_args(cls, args) -> SimConfig:
        """Factory method to create a SimConfig from parsed argparse arguments."""
        config = cls()

        # 1. Load from YAML config file if provided
        if hasattr(args, 'config') and args.config:
            config.config_file = args.config
            if Path(config.config_file).exists():
                config.update_from_yaml(config.config_file)
            else:
                logger.warning("Config file %s not found.", config.config_file)

        # 2. Override with command-line arguments
        arg_dict = vars(args)
        for key, value in arg_dict.items():
            if value is not None and hasattr(config, key):
                setattr(config, key, value)

        config.__post_init__()
        return config
