# smokecloud/core/loader.py
"""
Profile loading: named credentials and endpoint overrides from YAML.

Expected YAML::

    profiles:
      default:
        credential:
          type: keys
          id_key: "${SMOKECLOUD_ID_KEY}"
          secret_key: "${SMOKECLOUD_SECRET_KEY}"
        api_endpoint: "${SMOKECLOUD_API:-https://api.smokecloud.io/v3}"
        default_fds_version: "6.8.0"

Files are read in sorted path order; a profile defined in a later file
replaces the earlier one of the same name as a whole.
"""
from __future__ import annotations

import logging
import os
import re
from glob import glob
from pathlib import Path
from typing import Any, Iterable

import yaml
from pydantic import BaseModel, ValidationError

from smokecloud.contracts.credentials import Credential
from smokecloud.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# ${VAR} or ${VAR:-default}
ENV_REF = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


class Profile(BaseModel):
    name: str
    credential: Credential
    api_endpoint: str | None = None
    storage_endpoint: str | None = None
    default_fds_version: str | None = None


def expand_env(value: Any) -> Any:
    """Replace ``${VAR}`` references in every string of a YAML tree.

    Raises:
        ConfigurationError: If a referenced variable is unset and has no default.
    """
    if isinstance(value, dict):
        return {k: expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_env(v) for v in value]
    if isinstance(value, str):
        return ENV_REF.sub(_env_value, value)
    return value


def _env_value(ref: re.Match) -> str:
    name, default = ref.group(1), ref.group(2)
    if name in os.environ:
        return os.environ[name]
    if default is None:
        raise ConfigurationError(f"Environment variable '{name}' is not set and has no default")
    return default


def find_profile_files(patterns: Iterable[str]) -> list[Path]:
    found = {
        Path(match).resolve()
        for pattern in patterns
        for match in glob(os.path.expanduser(pattern))
    }
    return sorted(found)


def read_profile_file(path: Path) -> dict[str, dict[str, Any]]:
    """The raw ``profiles`` mapping of one file, with env references expanded."""
    with path.open("r", encoding="utf-8") as fh:
        content = yaml.safe_load(fh) or {}

    if not isinstance(content, dict):
        raise ConfigurationError(f"{path}: expected a mapping at the top level")
    profiles = content.get("profiles") or {}
    if not isinstance(profiles, dict):
        raise ConfigurationError(f"{path}: 'profiles' must be a mapping of name to profile")
    return {name: expand_env(spec or {}) for name, spec in profiles.items()}


def load_profiles(patterns: Iterable[str]) -> dict[str, Profile]:
    patterns = list(patterns)
    files = find_profile_files(patterns)
    if not files:
        logger.debug("No profile files match %s", patterns)
        return {}

    logger.info("Loading profiles from %s", [str(f) for f in files])
    profiles: dict[str, Profile] = {}
    for path in files:
        for name, raw in read_profile_file(path).items():
            try:
                profiles[name] = Profile.model_validate({"name": name, **raw})
            except ValidationError as exc:
                raise ConfigurationError(f"{path}: invalid profile '{name}': {exc}") from exc
    return profiles


def get_profile(name: str, patterns: Iterable[str]) -> Profile:
    profiles = load_profiles(patterns)
    if name not in profiles:
        raise ConfigurationError(f"Profile '{name}' not found. Available: {sorted(profiles)}")
    return profiles[name]
