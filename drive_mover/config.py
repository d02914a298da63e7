import configparser
import os
from dataclasses import dataclass
from pathlib import Path

DRIVE_KINDS = ("team", "shared")


@dataclass
class DriveConfig:
    drive_id: str
    pretty_name: str = "Home"
    drive_kind: str = "shared"  # "team" or "shared"
    credentials_file: str | None = None  # Service account key (JSON)


@dataclass
class CacheConfig:
    ttl_seconds: int = 3600
    max_entries: int = 1024


@dataclass
class ConnectionConfig:
    timeout_seconds: int = 30
    retry_attempts: int = 3
    retry_delay_seconds: int = 1


@dataclass
class LogConfig:
    level: str = "INFO"
    file: str = "drive-mover.log"
    console: bool = True


@dataclass
class AppConfig:
    drive: DriveConfig
    cache: CacheConfig
    connection: ConnectionConfig
    logging: LogConfig


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _parse_int(section: configparser.SectionProxy, key: str) -> int:
    raw = section.get(key)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Invalid {key} value in config: '{raw}' - must be an integer")


def load_config(config_path: str | None = None, **cli_args) -> AppConfig:
    """
    Load configuration from an INI file and/or CLI arguments.
    CLI arguments take precedence over the config file, which takes
    precedence over the DRIVE_ID environment variable.

    Args:
        config_path: Path to the INI configuration file.
        **cli_args: Key-value pairs from command line arguments.

    Returns:
        AppConfig: The populated configuration object.

    Raises:
        FileNotFoundError: If config_path is provided but does not exist.
        ValueError: If drive_id is missing or a value is malformed.
    """
    drive_config = {
        "drive_id": os.environ.get("DRIVE_ID") or None,
        "pretty_name": "Home",
        "drive_kind": "shared",
        "credentials_file": None,
    }
    cache_config = {
        "ttl_seconds": 3600,
        "max_entries": 1024,
    }
    connection_config = {
        "timeout_seconds": 30,
        "retry_attempts": 3,
        "retry_delay_seconds": 1,
    }
    log_config = {
        "level": "INFO",
        "file": "drive-mover.log",
        "console": True,
    }

    if config_path is not None:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        parser = configparser.ConfigParser()
        parser.read(config_file, encoding="utf-8")

        # Load [drive] section
        if parser.has_section("drive"):
            drive_section = parser["drive"]
            if drive_section.get("drive_id"):
                drive_config["drive_id"] = drive_section.get("drive_id")
            if drive_section.get("pretty_name"):
                drive_config["pretty_name"] = drive_section.get("pretty_name")
            if drive_section.get("drive_kind"):
                drive_config["drive_kind"] = drive_section.get("drive_kind").lower()
            if drive_section.get("credentials_file"):
                drive_config["credentials_file"] = drive_section.get("credentials_file")

        # Load [cache] section
        if parser.has_section("cache"):
            cache_section = parser["cache"]
            if cache_section.get("ttl_seconds"):
                cache_config["ttl_seconds"] = _parse_int(cache_section, "ttl_seconds")
            if cache_section.get("max_entries"):
                cache_config["max_entries"] = _parse_int(cache_section, "max_entries")

        # Load [connection] section
        if parser.has_section("connection"):
            conn_section = parser["connection"]
            for key in ("timeout_seconds", "retry_attempts", "retry_delay_seconds"):
                if conn_section.get(key):
                    connection_config[key] = _parse_int(conn_section, key)

        # Load [logging] section
        if parser.has_section("logging"):
            log_section = parser["logging"]
            if log_section.get("level"):
                log_config["level"] = log_section.get("level")
            if log_section.get("file") is not None:
                log_config["file"] = log_section.get("file")
            if log_section.get("console"):
                log_config["console"] = _parse_bool(log_section.get("console"))

    # Override with CLI arguments (cli_args take precedence)
    if cli_args.get("drive_id") is not None:
        drive_config["drive_id"] = cli_args["drive_id"]
    if cli_args.get("drive_kind") is not None:
        drive_config["drive_kind"] = cli_args["drive_kind"].lower()
    if cli_args.get("credentials_file") is not None:
        drive_config["credentials_file"] = cli_args["credentials_file"]
    if cli_args.get("debug"):
        log_config["level"] = "DEBUG"
        log_config["console"] = True

    if not drive_config["drive_id"]:
        raise ValueError("Missing required configuration fields: drive_id")

    if drive_config["drive_kind"] not in DRIVE_KINDS:
        raise ValueError(
            f"Invalid drive_kind: {drive_config['drive_kind']}. Must be one of: {', '.join(DRIVE_KINDS)}"
        )

    if cache_config["max_entries"] < 1:
        raise ValueError("max_entries must be at least 1")

    return AppConfig(
        drive=DriveConfig(
            drive_id=drive_config["drive_id"],
            pretty_name=drive_config["pretty_name"],
            drive_kind=drive_config["drive_kind"],
            credentials_file=drive_config["credentials_file"],
        ),
        cache=CacheConfig(
            ttl_seconds=cache_config["ttl_seconds"],
            max_entries=cache_config["max_entries"],
        ),
        connection=ConnectionConfig(
            timeout_seconds=connection_config["timeout_seconds"],
            retry_attempts=connection_config["retry_attempts"],
            retry_delay_seconds=connection_config["retry_delay_seconds"],
        ),
        logging=LogConfig(
            level=log_config["level"],
            file=log_config["file"],
            console=log_config["console"],
        ),
    )
