import os
from pathlib import Path
import toml
from typing import Dict, Any, Optional

TRUE_VALUES = ("1", "true", "yes", "on")


def get_config_path() -> Path:
    """Return the path to the configuration file."""
    env_path = os.environ.get("SIGNCHECK_CONFIG")
    if env_path:
        return Path(env_path)
    return Path.home() / ".signcheck" / "config.toml"


def load_config() -> Dict[str, Any]:
    """Load configuration from TOML file."""
    config_path = get_config_path()
    if not config_path.exists():
        return {}

    try:
        return toml.load(config_path)
    except (toml.TomlDecodeError, OSError) as e:
        raise ValueError(f"Failed to load config: {e}")


def get_verify_settings(
    udid: Optional[str] = None,
    certificate: Optional[str] = None,
    certificate_password: Optional[str] = None,
    verbose: Optional[bool] = None,
    output: Optional[str] = None,
) -> Dict[str, Any]:
    """Resolve verify options. CLI values win over environment, then config file."""
    verify_config = load_config().get("verify", {})
    if not isinstance(verify_config, dict):
        raise ValueError(
            f"Config section 'verify' must be a table, got {verify_config!r} "
            f"({get_config_path()})"
        )

    env_verbose = os.environ.get("SIGNCHECK_VERBOSE")
    if env_verbose is not None:
        env_verbose = env_verbose.strip().lower() in TRUE_VALUES

    def pick(cli_value, env_name, config_key, default=None):
        if cli_value is not None:
            return cli_value
        env_value = os.environ.get(env_name) if env_name else None
        if env_value:
            return env_value
        return verify_config.get(config_key, default)

    settings = {
        "udid": pick(udid, "SIGNCHECK_UDID", "udid"),
        "certificate": pick(certificate, "SIGNCHECK_CERTIFICATE", "certificate"),
        "certificate_password": pick(
            certificate_password, "SIGNCHECK_CERT_PASSWORD", "certificate_password"
        ),
        "output": pick(output, None, "output", "table"),
    }

    if verbose is not None:
        settings["verbose"] = verbose
    elif env_verbose is not None:
        settings["verbose"] = env_verbose
    else:
        settings["verbose"] = bool(verify_config.get("verbose", False))

    if settings["certificate"]:
        settings["certificate"] = Path(settings["certificate"]).expanduser()
    if settings["output"] not in ("table", "json"):
        raise ValueError(
            f"Unknown output format {settings['output']!r} in {get_config_path()}, "
            "expected 'table' or 'json'"
        )

    return settings
