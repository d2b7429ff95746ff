"""Validation and construction of the run configuration."""

from typing import Tuple

from .errors import ConfigError
from .models import RunConfig
from .utils import RECORD_TYPES, normalize_server, split_server


def lookup_record_type(mnemonic: str) -> Tuple[str, int]:
    """Resolve a record type mnemonic to its canonical name and TYPE code.

    Raises:
        ConfigError: if the mnemonic is not in RECORD_TYPES.
    """
    name = (mnemonic or '').strip().upper()
    try:
        return name, RECORD_TYPES[name]
    except KeyError:
        raise ConfigError(f"Invalid record type: {mnemonic}") from None


def validate_server(server: str) -> str:
    """Normalize server to host:port and check the port.

    Raises:
        ConfigError: if the host is empty or the port is not in 1..65535.
    """
    if not server or not server.strip():
        raise ConfigError("DNS server address must not be empty")
    normalized = normalize_server(server)
    host, port = split_server(normalized)
    if not host:
        raise ConfigError(f"Invalid DNS server address: {server}")
    try:
        port_number = int(port)
    except ValueError:
        raise ConfigError(f"Invalid DNS server port: {port!r}") from None
    if not 1 <= port_number <= 65535:
        raise ConfigError(f"DNS server port out of range: {port_number}")
    return normalized


def build_config(domain: str, record_type: str = 'A', queries: int = -1,
                 concurrency: int = 10, server: str = '8.8.8.8',
                 timeout: float = 5.0) -> RunConfig:
    """Build a validated RunConfig.

    Raises:
        ConfigError: on an empty domain, unknown record type, concurrency
            below 1, a query limit below -1 or a bad server address.
    """
    if not domain or not domain.strip():
        raise ConfigError("Please provide a domain name using the --domain flag")
    type_name, type_code = lookup_record_type(record_type)
    if concurrency < 1:
        raise ConfigError(f"Concurrency must be at least 1, got {concurrency}")
    if queries < -1:
        raise ConfigError(f"Number of queries must be -1 (continuous) or >= 0, got {queries}")

    return RunConfig(
        domain=domain.strip(),
        record_type=type_name,
        record_type_code=type_code,
        server=validate_server(server),
        concurrency=concurrency,
        queries=queries,
        timeout=timeout,
    )
