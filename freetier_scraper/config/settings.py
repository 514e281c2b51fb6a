"""
Load the provider table and run settings

The YAML file is read once per process. Environment variables (optionally
from a ``.env`` file) override individual settings:

- FREETIER_CONFIG: path to an alternative providers.yaml
- FREETIER_SNAPSHOT_PATH, FREETIER_LOG_LEVEL, FREETIER_POLITENESS_DELAY,
  FREETIER_README_PATH, FREETIER_UPDATE_README
"""
import os
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv
from jsonschema import Draft7Validator

from .enums import FetchMethod
from .schema import FallbackEntry, ProviderProfile, Settings
from ..core.exceptions import ConfigError
from ..extractors.registry import EXTRACTORS

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "providers.yaml"

_LIMIT = {'type': 'integer', 'minimum': 1}

CONFIG_SCHEMA = {
    'type': 'object',
    'required': ['providers'],
    'properties': {
        'settings': {
            'type': 'object',
            'properties': {
                'snapshot_path': {'type': 'string', 'minLength': 1},
                'request_timeout': {'type': 'integer', 'minimum': 1},
                'politeness_delay': {'type': 'number', 'minimum': 0},
                'log_level': {'enum': ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']},
                'log_dir': {'type': 'string'},
                'readme_path': {'type': 'string'},
                'update_readme': {'type': 'boolean'},
            },
            'additionalProperties': False,
        },
        'providers': {
            'type': 'object',
            'minProperties': 1,
            'additionalProperties': {
                'type': 'object',
                'required': ['name', 'url', 'extractor', 'fallback'],
                'properties': {
                    'name': {'type': 'string', 'minLength': 1},
                    'url': {'type': 'string', 'minLength': 1},
                    'alternate_url': {'type': ['string', 'null']},
                    'extractor': {'type': 'string'},
                    'fetch_method': {'enum': [m.value for m in FetchMethod]},
                    'enabled': {'type': 'boolean'},
                    'headers': {
                        'type': 'object',
                        'additionalProperties': {'type': 'string'},
                    },
                    'fallback': {
                        'type': 'object',
                        'required': ['daily_limit', 'monthly_limit'],
                        'properties': {
                            'daily_limit': _LIMIT,
                            'monthly_limit': _LIMIT,
                            'url': {'type': 'string'},
                            'note': {'type': ['string', 'null']},
                        },
                        'additionalProperties': False,
                    },
                },
                'additionalProperties': False,
            },
        },
    },
}

@dataclass(frozen=True)
class RunConfig:
    """Settings plus the ordered, immutable provider table"""
    settings: Settings
    providers: Tuple[ProviderProfile, ...]

    def provider(self, name: str) -> Optional[ProviderProfile]:
        for profile in self.providers:
            if profile.name == name:
                return profile
        return None

def load_config(config_path: Optional[str] = None, use_env: bool = True) -> RunConfig:
    """Load, validate and freeze the provider configuration"""
    if use_env:
        load_dotenv()
        config_path = config_path or os.getenv('FREETIER_CONFIG')

    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load configuration {path}: {e}") from e

    config = parse_config(raw)
    if use_env:
        config = RunConfig(settings=apply_env_overrides(config.settings), providers=config.providers)

    logger.info(f"Loaded configuration for {len(config.providers)} providers from {path}")
    return config

def parse_config(raw: Any) -> RunConfig:
    """Validate a parsed YAML document and convert it to dataclasses"""
    errors = sorted(Draft7Validator(CONFIG_SCHEMA).iter_errors(raw or {}), key=lambda e: list(e.path))
    if errors:
        details = "; ".join(f"{'/'.join(str(p) for p in e.path) or '<root>'}: {e.message}" for e in errors)
        raise ConfigError(f"Invalid provider configuration: {details}")

    settings = Settings(**(raw.get('settings') or {}))

    providers = []
    seen_names = set()
    for key, entry in raw['providers'].items():
        if entry['extractor'] not in EXTRACTORS:
            raise ConfigError(f"Provider {key} uses unknown extractor {entry['extractor']!r}")
        if entry['name'] in seen_names:
            raise ConfigError(f"Duplicate provider name: {entry['name']}")
        seen_names.add(entry['name'])

        fallback = entry['fallback']
        providers.append(ProviderProfile(
            key=key,
            name=entry['name'],
            url=entry['url'],
            extractor=entry['extractor'],
            alternate_url=entry.get('alternate_url'),
            fetch_method=FetchMethod(entry.get('fetch_method', FetchMethod.HTTP.value)),
            headers=dict(entry.get('headers') or {}),
            enabled=entry.get('enabled', True),
            fallback=FallbackEntry(
                name=entry['name'],
                daily_limit=fallback['daily_limit'],
                monthly_limit=fallback['monthly_limit'],
                url=fallback.get('url', entry['url']),
                note=fallback.get('note'),
            ),
        ))

    return RunConfig(settings=settings, providers=tuple(providers))

def apply_env_overrides(settings: Settings) -> Settings:
    """Apply FREETIER_* environment variables on top of the YAML settings"""
    overrides: Dict[str, Any] = {}

    if os.getenv('FREETIER_SNAPSHOT_PATH'):
        overrides['snapshot_path'] = os.environ['FREETIER_SNAPSHOT_PATH']
    if os.getenv('FREETIER_LOG_LEVEL'):
        overrides['log_level'] = os.environ['FREETIER_LOG_LEVEL'].upper()
    if os.getenv('FREETIER_README_PATH'):
        overrides['readme_path'] = os.environ['FREETIER_README_PATH']
    if os.getenv('FREETIER_UPDATE_README'):
        overrides['update_readme'] = os.environ['FREETIER_UPDATE_README'].strip().lower() in ('1', 'true', 'yes')
    if os.getenv('FREETIER_POLITENESS_DELAY'):
        try:
            overrides['politeness_delay'] = float(os.environ['FREETIER_POLITENESS_DELAY'])
        except ValueError as e:
            raise ConfigError(f"FREETIER_POLITENESS_DELAY must be a number: {e}") from e

    return replace(settings, **overrides) if overrides else settings
