"""Loading and checking the lookoutd and web server configuration files."""

from __future__ import annotations

import copy
import logging
import os
import re
from dataclasses import dataclass, field
from datetime import timedelta
from fractions import Fraction
from typing import Any

import yaml

from .analysis import AnalyzerConfig

log = logging.getLogger(__name__)

_MASK = "****"

_UNITS_NS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

_COMPONENT = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

# string settings of the github provider section that the web server needs
_WEB_GITHUB_STRINGS = ("private_key", "client_id", "client_secret")


class ConfigError(ValueError):
    """Raised when a configuration file cannot be read, parsed or is incomplete."""


def parse_duration(value: str) -> timedelta:
    """Parse a duration such as ``"1h30m"``, ``"300ms"`` or ``"-2.5s"``.

    Raises :class:`ValueError` for anything that is not a valid duration.
    """
    invalid = ValueError(f'time: invalid duration "{value}"')
    if not isinstance(value, str):
        raise invalid
    text = value
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise invalid

    total = Fraction(0)
    position = 0
    while position < len(text):
        match = _COMPONENT.match(text, position)
        if match is None:
            raise invalid
        number, unit = match.groups()
        total += Fraction(number) * _UNITS_NS[unit]
        position = match.end()

    return timedelta(microseconds=round(sign * total / 1000))


def _duration(value: Any, key: str) -> timedelta:
    if isinstance(value, bool):
        raise ConfigError(f"Can't parse configuration file: invalid duration for {key}")
    if isinstance(value, int):
        # bare integers are nanoseconds
        return timedelta(microseconds=round(Fraction(value, 1000)))
    try:
        return parse_duration(value)
    except ValueError as exc:
        raise ConfigError(f"Can't parse configuration file: {exc}") from exc


def _mapping(value: Any, key: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"Can't parse configuration file: {key} must be a mapping")
    return value


def _sequence(value: Any, key: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"Can't parse configuration file: {key} must be a list")
    return value


def _string(value: Any, key: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigError(f"Can't parse configuration file: {key} must be a string")
    return value


def _integer(value: Any, key: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"Can't parse configuration file: {key} must be an integer")
    return value


def _boolean(value: Any, key: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigError(f"Can't parse configuration file: {key} must be a boolean")
    return value


@dataclass
class TimeoutConfig:
    """Timeouts for analyzers, GitHub requests, git fetches and bblfsh parsing."""

    analyzer_review: timedelta = field(default_factory=lambda: timedelta(minutes=10))
    analyzer_push: timedelta = field(default_factory=lambda: timedelta(minutes=60))
    github_request: timedelta = field(default_factory=lambda: timedelta(minutes=1))
    git_fetch: timedelta = field(default_factory=lambda: timedelta(minutes=20))
    bblfsh_parse: timedelta = field(default_factory=lambda: timedelta(minutes=2))


@dataclass
class RepoConfig:
    """Configuration of one repository; only the GitHub provider is supported."""

    url: str = ""
    client: dict[str, Any] = field(default_factory=dict)


@dataclass
class Config:
    """The main lookoutd configuration."""

    analyzers: list[AnalyzerConfig] = field(default_factory=list)
    github: dict[str, Any] = field(default_factory=dict)
    repositories: list[RepoConfig] = field(default_factory=list)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)


@dataclass
class WebConfig:
    """The settings the web server needs from the configuration file."""

    private_key: str = ""
    app_id: int = 0
    client_id: str = ""
    client_secret: str = ""
    signing_key: str = ""


def _read_yaml(path: str) -> dict:
    with open(path, encoding="utf-8") as handle:
        text = handle.read()
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Can't parse configuration file: {exc}") from exc
    return _mapping(data, "document")


def _analyzer(entry: Any) -> AnalyzerConfig:
    entry = _mapping(entry, "analyzers")
    return AnalyzerConfig(
        name=_string(entry.get("name"), "name"),
        addr=_string(entry.get("addr"), "addr"),
        disabled=_boolean(entry.get("disabled"), "disabled"),
        feedback=_string(entry.get("feedback"), "feedback"),
        settings=dict(_mapping(entry.get("settings"), "settings")),
    )


def _repository(entry: Any) -> RepoConfig:
    entry = _mapping(entry, "repositories")
    return RepoConfig(
        url=_string(entry.get("url"), "url"),
        client=dict(_mapping(entry.get("client"), "client")),
    )


def _timeouts(section: dict) -> TimeoutConfig:
    timeouts = TimeoutConfig()
    for key in (
        "analyzer_review",
        "analyzer_push",
        "github_request",
        "git_fetch",
        "bblfsh_parse",
    ):
        if section.get(key) is not None:
            setattr(timeouts, key, _duration(section[key], key))
    return timeouts


def load_config(path: str) -> Config:
    """Read the lookoutd configuration at ``path``.

    Timeouts not given in the file keep their defaults. Raises
    :class:`ConfigError` when the file cannot be read or parsed.
    """
    try:
        data = _read_yaml(path)
    except OSError as exc:
        # docker-compose mounts a missing 'config.yml' as an empty directory
        if path == "config.yml" and os.path.isdir(path):
            raise ConfigError(
                "Can't open configuration file. If you are using docker-compose, "
                "make sure './config.yml' exists"
            ) from exc
        raise ConfigError(f"Can't open configuration file: {exc}") from exc

    providers = _mapping(data.get("providers"), "providers")
    config = Config(
        analyzers=[_analyzer(entry) for entry in _sequence(data.get("analyzers"), "analyzers")],
        github=dict(_mapping(providers.get("github"), "github")),
        repositories=[
            _repository(entry)
            for entry in _sequence(data.get("repositories"), "repositories")
        ],
        timeout=_timeouts(_mapping(data.get("timeout"), "timeout")),
    )

    log.info("loaded configuration: %r", masked_config(config))
    return config


def masked_config(config: Config) -> Config:
    """Return a copy of ``config`` with repository tokens hidden."""
    masked = copy.deepcopy(config)
    for repo in masked.repositories:
        if repo.client.get("token"):
            repo.client["token"] = _MASK
    return masked


def validate_analyzer_config(config: AnalyzerConfig) -> None:
    """Raise :class:`ConfigError` if the analyzer has no name or no address."""
    if not config.name:
        raise ConfigError("missing 'name' in analyzer config")
    if not config.addr:
        raise ConfigError(f"missing 'addr' in config for analyzer {config.name}")


def enabled_analyzers(config: Config) -> dict[str, AnalyzerConfig]:
    """Return the enabled analyzers by name, checking each of them."""
    analyzers: dict[str, AnalyzerConfig] = {}
    for analyzer in config.analyzers:
        if analyzer.disabled:
            continue
        validate_analyzer_config(analyzer)
        analyzers[analyzer.name] = analyzer
    return analyzers


def load_web_config(path: str) -> WebConfig:
    """Read and check the settings the web server needs from ``path``."""
    try:
        data = _read_yaml(path)
    except OSError as exc:
        raise ConfigError(f"Can't open configuration file: {exc}") from exc

    providers = _mapping(data.get("providers"), "providers")
    github = _mapping(providers.get("github"), "github")
    web = _mapping(data.get("web"), "web")
    strings = {key: _string(github.get(key), key) for key in _WEB_GITHUB_STRINGS}
    signing_field = "signing_key"
    signing = _string(web.get(signing_field), signing_field)
    config = WebConfig(
        app_id=_integer(github.get("app_id"), "app_id"),
        signing_key=signing,
        **strings,
    )

    missing = "Missing field in configuration file: "
    if not config.private_key:
        raise ConfigError(missing + "provider github private_key is required")
    if config.app_id == 0:
        raise ConfigError(missing + "provider github app_id is required")
    if not config.client_id:
        raise ConfigError(missing + "provider github client_id is required")
    if not config.client_secret:
        raise ConfigError(missing + "provider github client_secret is required")
    if not config.signing_key:
        raise ConfigError(missing + "web signing_key is required")
    return config