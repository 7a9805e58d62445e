"""
BuildConfig - Configuration for a build run.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .errors import ConfigError
from .transform_spec import TransformSpec, parse_transforms


DEFAULT_LICENSE = 'https://creativecommons.org/licenses/by-nc-sa/4.0/ unless otherwise noted'

ENV_OVERRIDES = {
    'PHOTOBUILD_SOURCE': ('source', str),
    'PHOTOBUILD_TARGET': ('target', str),
    'PHOTOBUILD_VARIANT_CONCURRENCY': ('variant_concurrency', int),
    'PHOTOBUILD_COPY_CONCURRENCY': ('copy_concurrency', int),
}


@dataclass
class BuildConfig:
    """
    Configuration for a build run.

    Attributes:
        source: Source root holding the descriptors and photos
        target: Output root (relative paths are resolved against source)
        transforms: Transform key -> rule, as written in the config file
        stats: Statistics name -> file, relative to source
        folders: Folders copied verbatim into the output
        license: License string written to index.json
        albums_file: Album descriptor name
        events_file: Event descriptor name
        variant_concurrency: Concurrent variant jobs
        copy_concurrency: Concurrent file copies
        prepare_concurrency: Photos prepared concurrently
        retry_attempts: Regenerations after a failed read-back
        settle_delay: Seconds to wait after writing a variant
    """
    source: str = '.'
    target: str = 'public'
    transforms: Dict[str, dict] = field(default_factory=dict)
    stats: Dict[str, str] = field(default_factory=dict)
    folders: List[str] = field(default_factory=list)
    license: str = DEFAULT_LICENSE
    albums_file: str = 'photos.json'
    events_file: str = 'events.json'
    variant_concurrency: int = 3
    copy_concurrency: int = 10
    prepare_concurrency: int = 5
    retry_attempts: int = 3
    settle_delay: float = 0.03

    @property
    def cwd(self) -> Path:
        return Path(self.source)

    @property
    def target_folder(self) -> Path:
        return self.cwd / self.target

    def transform_specs(self) -> List[TransformSpec]:
        """Transforms sorted by key."""
        return parse_transforms(self.transforms)

    def validate(self) -> List[str]:
        """Return a list of problems; empty if the configuration is usable."""
        errors = []
        if not self.transforms:
            errors.append("No transforms configured")
        else:
            for spec in self.transform_specs():
                errors.extend(spec.validate())
        for name in ('variant_concurrency', 'copy_concurrency', 'prepare_concurrency'):
            if getattr(self, name) < 1:
                errors.append(f"{name} must be at least 1")
        if self.retry_attempts < 0:
            errors.append("retry_attempts must not be negative")
        if not self.cwd.is_dir():
            errors.append(f"Source folder not found: {self.cwd}")
        return errors

    def apply_env(self, environ: Optional[Dict[str, str]] = None) -> 'BuildConfig':
        """Override fields from PHOTOBUILD_* environment variables."""
        environ = os.environ if environ is None else environ
        for var, (name, convert) in ENV_OVERRIDES.items():
            value = environ.get(var)
            if value:
                try:
                    setattr(self, name, convert(value))
                except ValueError as e:
                    raise ConfigError(f"Invalid {var}={value!r}: {e}") from e
        return self

    @classmethod
    def from_dict(cls, data: dict, base_dir: Optional[Path] = None) -> 'BuildConfig':
        """Create from a config mapping; `source` is resolved against `base_dir`."""
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")
        config = cls(**data)
        if base_dir is not None:
            config.source = str(base_dir / config.source)
        return config

    @classmethod
    def load(cls, filepath: str) -> 'BuildConfig':
        """Load configuration from a JSON file."""
        path = Path(filepath)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise ConfigError(f"Config file not found: {filepath}") from e
        except ValueError as e:
            raise ConfigError(f"Invalid config file {filepath}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Invalid config file {filepath}: expected an object")
        return cls.from_dict(data, base_dir=path.parent)
