"""
Connection and telemetry settings for BIG-IP resource adapters.

Settings are read from a TOML secrets file and then overridden by environment
variables. The file lookup order is:

1. Explicit ``BIGIP_LTM_SECRETS_PATH`` environment variable.
2. Project-relative ``.secrets/secret.toml`` (both from CWD and the package root).
3. Project-relative ``.secrets/secrets.toml``.
4. Fallback to ``.secrets/secrets.example.toml`` for scaffolding values.

The file may carry a ``[bigip]`` section (``address``, ``username``,
``password``, ``port``, ``verify_tls``, ``timeout``) and a ``[teem]`` section
(``disabled``, ``api_key``). Environment overrides use the same names as the
Terraform BIG-IP provider: ``BIGIP_HOST``, ``BIGIP_USER``, ``BIGIP_PASSWORD``,
``BIGIP_PORT``, ``BIGIP_VERIFY_CERT``, ``TEEM_DISABLE`` and ``TEEM_API_KEY``.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional

PACKAGE_VERSION = "0.1.0"
DEFAULT_USER_AGENT = f"python/bigip-ltm/{PACKAGE_VERSION}"
DEFAULT_PORT = 443
DEFAULT_TIMEOUT = 30.0


@dataclass(slots=True)
class DeviceSettings:
    """Management address and credentials of one BIG-IP device."""

    address: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    port: int = DEFAULT_PORT
    verify_tls: bool = False
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    def missing(self) -> list[str]:
        """Names of settings that must be provided before the device can be reached."""

        return [name for name in ("address", "username", "password") if not getattr(self, name)]


@dataclass(slots=True)
class TelemetrySettings:
    """Anonymous usage reporting switches."""

    disabled: bool = False
    api_key: Optional[str] = field(default=None, repr=False)


@dataclass(slots=True)
class Settings:
    """Resolved settings plus the file they came from."""

    source_path: Optional[Path]
    device: DeviceSettings
    telemetry: TelemetrySettings = field(default_factory=TelemetrySettings)


def _discover_project_root() -> Optional[Path]:
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "pyproject.toml").is_file():
            return parent
    return None


def _candidate_paths() -> Iterable[Path]:
    env_override = os.getenv("BIGIP_LTM_SECRETS_PATH")
    if env_override:
        yield Path(env_override).expanduser()

    search_roots = [Path.cwd()]
    package_root = _discover_project_root()
    if package_root and package_root not in search_roots:
        search_roots.append(package_root)

    for base in search_roots:
        secrets_dir = base / ".secrets"
        for filename in ("secret.toml", "secrets.toml", "secrets.example.toml"):
            yield secrets_dir / filename


def _load_toml(path: Path) -> Dict[str, object]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _parse_bool(value: object, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return default


def _section(raw: Mapping[str, object], name: str) -> Mapping[str, object]:
    section = raw.get(name, {})
    return section if isinstance(section, dict) else {}


def _text(section: Mapping[str, object], key: str) -> Optional[str]:
    value = section.get(key)
    return str(value) if isinstance(value, (str, int)) and str(value) else None


def _extract_device_settings(raw: Mapping[str, object], env: Mapping[str, str]) -> DeviceSettings:
    section = _section(raw, "bigip")
    port = env.get("BIGIP_PORT") or _text(section, "port")
    timeout = section.get("timeout")
    return DeviceSettings(
        address=env.get("BIGIP_HOST") or _text(section, "address"),
        username=env.get("BIGIP_USER") or _text(section, "username"),
        password=env.get("BIGIP_PASSWORD") or _text(section, "password"),
        port=int(port) if port else DEFAULT_PORT,
        verify_tls=_parse_bool(env.get("BIGIP_VERIFY_CERT", section.get("verify_tls")), False),
        timeout=float(timeout) if isinstance(timeout, (int, float)) else DEFAULT_TIMEOUT,
    )


def _extract_telemetry_settings(raw: Mapping[str, object], env: Mapping[str, str]) -> TelemetrySettings:
    section = _section(raw, "teem")
    return TelemetrySettings(
        disabled=_parse_bool(env.get("TEEM_DISABLE", section.get("disabled")), False),
        api_key=env.get("TEEM_API_KEY") or _text(section, "api_key"),
    )


def load_settings(strict: bool = False, *, env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Resolve settings from the first secrets file found and the environment.

    Parameters
    ----------
    strict:
        When ``True`` raise ``FileNotFoundError`` if no secrets file exists.
        Environment-only setups should leave it ``False``.
    env:
        Environment mapping, defaults to :data:`os.environ`.
    """

    environ = os.environ if env is None else env
    for path in _candidate_paths():
        if path.is_file():
            data = _load_toml(path)
            return Settings(
                source_path=path,
                device=_extract_device_settings(data, environ),
                telemetry=_extract_telemetry_settings(data, environ),
            )

    if strict:
        raise FileNotFoundError("No secrets file found. Configure BIGIP_LTM_SECRETS_PATH or .secrets/secret.toml.")

    return Settings(
        source_path=None,
        device=_extract_device_settings({}, environ),
        telemetry=_extract_telemetry_settings({}, environ),
    )
