"""
Configuration loader for compare-dumps

Holds the reserved ledger-contract identifier used by the normalizer and the
directory convention walked in directory mode. Values come from built-in
defaults, optionally overridden by a YAML file validated against a schema.
"""

import logging
import os
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, Optional

import jsonschema
import yaml

from compare_dumps.comparison.exceptions import DumpCompareError

logger = logging.getLogger(__name__)


class ConfigurationError(DumpCompareError):
    """Exception raised for configuration-related errors."""

    pass


# Ledger contract whose storage entries are bookkeeping noise
LEDGER_CONTRACT_ID = -2

# Directory convention of per-block dump files
DEFAULT_BUCKET_STEP = 100000
DEFAULT_MAX_BLOCK = 6000000
DEFAULT_FILE_STEP = 1000
DEFAULT_BUCKET_SPAN = 99000
DEFAULT_BUCKET_DIR_TEMPLATE = "BlockStorage_{bucket}"
DEFAULT_FILE_TEMPLATE = "dump-block-{index}.json"

# Optional config file location when --config is not given
CONFIG_FILE_ENV = "COMPARE_DUMPS_CONFIG"

CONFIG_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "normalizer": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "ledger_contract_id": {
                    "type": "integer",
                    "minimum": -(2**31),
                    "maximum": 2**32 - 1,
                },
            },
        },
        "traversal": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "bucket_step": {"type": "integer", "minimum": 1},
                "max_block": {"type": "integer", "minimum": 0},
                "file_step": {"type": "integer", "minimum": 1},
                "bucket_span": {"type": "integer", "minimum": 0},
                "bucket_dir_template": {"type": "string", "pattern": "\\{bucket\\}"},
                "file_template": {"type": "string", "pattern": "\\{index\\}"},
            },
        },
    },
}


@dataclass
class NormalizerConfig:
    """Normalizer parameters."""

    ledger_contract_id: int = LEDGER_CONTRACT_ID


@dataclass
class TraversalConfig:
    """
    Directory-mode file naming convention.

    Buckets are named by multiples of bucket_step up to max_block inclusive.
    Bucket b holds files for indices b - bucket_span .. b in file_step
    increments, negative indices skipped.
    """

    bucket_step: int = DEFAULT_BUCKET_STEP
    max_block: int = DEFAULT_MAX_BLOCK
    file_step: int = DEFAULT_FILE_STEP
    bucket_span: int = DEFAULT_BUCKET_SPAN
    bucket_dir_template: str = DEFAULT_BUCKET_DIR_TEMPLATE
    file_template: str = DEFAULT_FILE_TEMPLATE

    def bucket_dir(self, bucket: int) -> str:
        return self.bucket_dir_template.format(bucket=bucket)

    def file_name(self, index: int) -> str:
        return self.file_template.format(index=index)


@dataclass
class Settings:
    """
    Runtime configuration for a comparison run.
    """

    normalizer: NormalizerConfig = field(default_factory=NormalizerConfig)
    traversal: TraversalConfig = field(default_factory=TraversalConfig)
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for reports."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: Optional[str] = None) -> "Settings":
        """
        Build settings from a config mapping, validating it against the schema.

        Args:
            data: Parsed configuration mapping (may be empty)
            source: Where the mapping came from, for error messages

        Raises:
            ConfigurationError: If the mapping does not match the schema
        """
        try:
            jsonschema.validate(instance=data, schema=CONFIG_SCHEMA)
        except jsonschema.ValidationError as e:
            location = "/".join(str(part) for part in e.absolute_path) or "<root>"
            raise ConfigurationError(
                f"Configuration {source or '<inline>'} failed validation at {location}: {e.message}"
            ) from e

        traversal = TraversalConfig(**data.get("traversal", {}))
        try:
            traversal.bucket_dir(0)
            traversal.file_name(0)
        except (KeyError, IndexError, ValueError) as e:
            raise ConfigurationError(
                f"Configuration {source or '<inline>'} has an unusable path template: {e!r}"
            ) from e

        return cls(
            normalizer=NormalizerConfig(**data.get("normalizer", {})),
            traversal=traversal,
            source=source,
        )

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Settings":
        """
        Load settings from a YAML file, falling back to built-in defaults.

        Priority:
        1. config_path argument (--config)
        2. COMPARE_DUMPS_CONFIG environment variable
        3. Defaults

        Raises:
            ConfigurationError: If the file is missing, unreadable, or invalid
        """
        path = config_path or os.getenv(CONFIG_FILE_ENV)
        if not path:
            logger.debug("No configuration file given; using defaults")
            return cls()

        try:
            with open(path, "r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Configuration file not found: {path}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        if content is None:
            logger.warning(f"Empty configuration file: {path}")
            content = {}

        settings = cls.from_dict(content, source=path)
        logger.info(f"Loaded configuration from {path}")
        return settings
