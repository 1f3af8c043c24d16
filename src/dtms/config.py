"""
Configuration

dtms reads an optional TOML file. The only setting the library itself
cares about is the default timezone for naive input; it is passed
explicitly (tz=...) to every constructor rather than looked up from
process-wide state.

Example config.toml:

    timezone = "Europe/Paris"
    format = "Y-m-d H:i:s.u"
    interval_format = "%RP%yY%mM%dDT%hH%iM%sS"

    [logging]
    level = "DEBUG"
"""

import logging
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from typing import Any, Dict, Optional, Union

import toml

from .calendar.engine import resolve_timezone
from .instant import Instant

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = 'UTC'


@dataclass
class DtmsConfig:
    """
    Settings for the dtms command line and for callers that want one
    place to keep their defaults.

    Attributes:
        timezone: zone for naive timestamps (IANA name or "UTC")
        format: output template for instants
        interval_format: %-template for intervals; None means the
                         canonical text form (e.g. "-PT4.469135S")
        log_level: logging level name
    """
    timezone: str = DEFAULT_TIMEZONE
    format: str = Instant.ISO8601
    interval_format: Optional[str] = None
    log_level: str = 'INFO'

    def tzinfo(self) -> tzinfo:
        return resolve_timezone(self.timezone)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DtmsConfig":
        logging_section = data.get('logging', {})
        return cls(
            timezone=data.get('timezone', DEFAULT_TIMEZONE),
            format=data.get('format', Instant.ISO8601),
            interval_format=data.get('interval_format'),
            log_level=str(logging_section.get('level', 'INFO')).upper(),
        )


def load_config(config_path: Union[None, str, Path] = None) -> DtmsConfig:
    """Load configuration from a TOML file, or defaults if there is none."""
    if config_path and Path(config_path).exists():
        with open(config_path, 'r') as f:
            data = toml.load(f)
        logger.debug(f"Loaded configuration from {config_path}")
        return DtmsConfig.from_dict(data)

    if config_path:
        logger.warning(f"Config file {config_path} not found, using defaults")
    return DtmsConfig()
