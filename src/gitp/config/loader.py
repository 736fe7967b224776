"""
Configuration loader for gitp.

The tool keeps its settings in a JSON file named ``config.json`` inside
the ``~/.gitp/`` directory of the user's home directory (the directory
can be moved with the ``GITP_HOME`` environment variable). The file is
read once at startup into an immutable :class:`Config` value and is
rewritten wholesale by the ``set-*`` commands.

A missing file is not an error: it simply yields an empty configuration
so that the ``set-*`` commands can create it. A file that cannot be read,
is not valid JSON, or holds fields of the wrong type raises
:class:`ConfigError`.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


logger = logging.getLogger(__name__)
# Attach a null handler to avoid "No handler" warnings or logging errors in
# environments where the root logger may be closed. Logging configured by
# the CLI takes over once it runs.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


CONFIG_FILE_NAME = "config.json"
HOME_ENV_VAR = "GITP_HOME"

# Providers that talk to a local server and therefore need no API key.
KEYLESS_PROVIDERS = frozenset({"ollama"})


class ConfigError(Exception):
    """Raised when the configuration file is unreadable or invalid."""

    pass


@dataclass(frozen=True)
class TicketForPath:
    """A default ticket applied when the working directory matches ``path``."""

    path: str
    ticket: str


@dataclass(frozen=True)
class ConventionalPath:
    """A path (literal or regex) where conventional commits are enforced."""

    path: str


@dataclass(frozen=True)
class Config:
    """Settings for one invocation of gitp.

    Attributes
    ----------
    provider : str
        Backend identifier, e.g. ``"openai"``, ``"anthropic"`` or ``"ollama"``.
    model : str
        Model identifier understood by the backend.
    api_key : str
        Credential sent to the backend.
    default_ticket : str
        Ticket used when neither the branch nor a path entry yields one.
    default_ticket_for : Tuple[TicketForPath, ...]
        Ordered path-specific default tickets.
    use_conventional_commits_in : Tuple[ConventionalPath, ...]
        Ordered paths where conventional commit formatting applies.
    base_url : str
        Optional endpoint override for the backend.
    request_timeout : float
        Timeout in seconds for backend requests.
    extra : Dict[str, Any]
        Unrecognized keys, preserved when the file is rewritten.
    """

    provider: str = ""
    model: str = ""
    api_key: str = ""
    default_ticket: str = ""
    default_ticket_for: Tuple[TicketForPath, ...] = ()
    use_conventional_commits_in: Tuple[ConventionalPath, ...] = ()
    base_url: str = ""
    request_timeout: float = 60.0
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    def missing_fields(self) -> List[str]:
        """Return the names of required settings that are not set."""
        missing = []
        if not self.provider:
            missing.append("provider")
        if not self.model:
            missing.append("model")
        if not self.api_key and self.provider not in KEYLESS_PROVIDERS:
            missing.append("apiKey")
        return missing

    def with_default_ticket_for(self, path: str, ticket: str) -> "Config":
        """Return a copy with ``ticket`` set for ``path``.

        An existing entry for the same path is replaced in place, otherwise
        the entry is appended.
        """
        entries = list(self.default_ticket_for)
        for index, entry in enumerate(entries):
            if entry.path == path:
                entries[index] = TicketForPath(path=path, ticket=ticket)
                break
        else:
            entries.append(TicketForPath(path=path, ticket=ticket))
        return replace(self, default_ticket_for=tuple(entries))

    def with_conventional_path(self, path: str) -> "Config":
        """Return a copy with ``path`` added to the conventional commit paths."""
        if any(entry.path == path for entry in self.use_conventional_commits_in):
            return self
        entries = self.use_conventional_commits_in + (ConventionalPath(path=path),)
        return replace(self, use_conventional_commits_in=entries)

    def without_conventional_path(self, path: str) -> "Config":
        """Return a copy with every entry for ``path`` removed."""
        entries = tuple(
            entry for entry in self.use_conventional_commits_in if entry.path != path
        )
        return replace(self, use_conventional_commits_in=entries)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to the on-disk (camelCase) representation."""
        data: Dict[str, Any] = dict(self.extra)
        data.update(
            {
                "provider": self.provider,
                "model": self.model,
                "apiKey": self.api_key,
                "defaultTicket": self.default_ticket,
                "defaultTicketFor": [
                    {"path": entry.path, "ticket": entry.ticket}
                    for entry in self.default_ticket_for
                ],
                "useConventionalCommitsIn": [
                    {"path": entry.path} for entry in self.use_conventional_commits_in
                ],
                "requestTimeout": self.request_timeout,
            }
        )
        if self.base_url:
            data["baseUrl"] = self.base_url
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Build a configuration from its on-disk representation.

        Raises
        ------
        ConfigError
            If a recognized field has the wrong type.
        """
        for key in ("provider", "model", "apiKey", "defaultTicket", "baseUrl"):
            if key in data and data[key] is not None and not isinstance(data[key], str):
                raise ConfigError(f"'{key}' must be a string")
        timeout = data.get("requestTimeout", 60.0)
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            raise ConfigError("'requestTimeout' must be a number")

        ticket_entries = []
        for item in _list_field(data, "defaultTicketFor"):
            if not isinstance(item, dict) or not isinstance(item.get("path"), str):
                raise ConfigError("'defaultTicketFor' entries need a string 'path'")
            if not isinstance(item.get("ticket"), str):
                raise ConfigError("'defaultTicketFor' entries need a string 'ticket'")
            ticket_entries.append(TicketForPath(path=item["path"], ticket=item["ticket"]))

        conventional_entries = []
        for item in _list_field(data, "useConventionalCommitsIn"):
            if not isinstance(item, dict) or not isinstance(item.get("path"), str):
                raise ConfigError("'useConventionalCommitsIn' entries need a string 'path'")
            conventional_entries.append(ConventionalPath(path=item["path"]))

        known = {
            "provider",
            "model",
            "apiKey",
            "defaultTicket",
            "defaultTicketFor",
            "useConventionalCommitsIn",
            "baseUrl",
            "requestTimeout",
        }
        return cls(
            provider=data.get("provider") or "",
            model=data.get("model") or "",
            api_key=data.get("apiKey") or "",
            default_ticket=data.get("defaultTicket") or "",
            default_ticket_for=tuple(ticket_entries),
            use_conventional_commits_in=tuple(conventional_entries),
            base_url=data.get("baseUrl") or "",
            request_timeout=float(timeout),
            extra={key: value for key, value in data.items() if key not in known},
        )


def _list_field(data: Dict[str, Any], key: str) -> List[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"'{key}' must be a list")
    return value


def _get_config_directory() -> Path:
    """Return the directory holding the gitp configuration.

    Defaults to ``~/.gitp``; the ``GITP_HOME`` environment variable
    overrides it.
    """
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".gitp"


def config_path() -> Path:
    """Return the full path of the configuration file."""
    return _get_config_directory() / CONFIG_FILE_NAME


def load_config(path: Optional[Path] = None) -> Config:
    """Load the user configuration.

    Parameters
    ----------
    path : Path, optional
        Explicit file to read. Defaults to :func:`config_path`.

    Returns
    -------
    Config
        The parsed configuration, or an empty one when the file is missing.

    Raises
    ------
    ConfigError
        If the file cannot be read, is malformed, or has invalid fields.
    """
    path = path or config_path()
    if not path.exists():
        logger.debug("Configuration file '%s' does not exist; using defaults", path)
        return Config()

    try:
        content = path.read_text(encoding="utf-8")
        data = json.loads(content) if content.strip() else {}
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Invalid configuration in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {path} must be a JSON object")

    config = Config.from_dict(data)
    logger.debug("Loaded configuration from: %s", path)
    return config


def save_config(config: Config, path: Optional[Path] = None) -> Path:
    """Write ``config`` to disk, replacing the previous file.

    Returns
    -------
    Path
        The file that was written.

    Raises
    ------
    ConfigError
        If the file cannot be written.
    """
    path = path or config_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
    except OSError as exc:
        logger.error("Failed to write configuration file: %s", exc)
        raise ConfigError(f"Could not write {path}: {exc}") from exc
    logger.debug("Saved configuration to: %s", path)
    return path
