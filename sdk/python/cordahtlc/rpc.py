# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2026 cordahtlc Authors

"""
Connection layer for a Corda node's HTTP/JSON RPC gateway.

Data directory (default: ~/.cordahtlc):
    ~/.cordahtlc/
    ├── config.yaml          # Connection settings
    └── htlc.log             # Operation log (if log_file is set)

Example config.yaml:
    host: localhost
    port: 10009
    username: clientUser1
    password: test
    log_file: htlc.log

Usage:
    from cordahtlc import NodeConfig, open_connection

    config = NodeConfig.from_env()
    with open_connection(config) as rpc:
        rpc.get("/htlc/<contract-id>/locked")
"""

import os
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterator, Mapping, Optional

import requests


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

# Matches the RPC user of the sample CorDapp nodes
DEFAULT_USERNAME = "clientUser1"
DEFAULT_PASSWORD = "test"
DEFAULT_TIMEOUT = 30

DEFAULT_DATA_DIR = "~/.cordahtlc"

HOST_KEY = "CORDA_HOST"
PORT_KEY = "CORDA_PORT"


# -----------------------------------------------------------------------------
# Exceptions
# -----------------------------------------------------------------------------

class CordaRPCError(Exception):
    """Base exception for node RPC errors"""
    pass


class ConfigError(CordaRPCError):
    """Connection settings missing or malformed"""
    pass


class AuthenticationError(CordaRPCError):
    """Node rejected the RPC credentials"""
    pass


class NodeUnavailableError(CordaRPCError):
    """Node not reachable"""
    pass


class RemoteRejectedError(CordaRPCError):
    """Node accepted the request but the flow failed."""
    def __init__(self, reason: str, status_code: Optional[int] = None):
        self.reason = reason
        self.status_code = status_code
        super().__init__(reason)


class ContractNotFoundError(RemoteRejectedError):
    """No HTLC state for the given contract id."""
    pass


class ResponseFormatError(CordaRPCError):
    """Node answered with a body that could not be decoded."""
    pass


# -----------------------------------------------------------------------------
# Types
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class NodeConfig:
    """Node connection settings, built once at startup."""
    host: Optional[str] = None
    port: Optional[int] = None
    username: str = DEFAULT_USERNAME
    password: str = DEFAULT_PASSWORD
    timeout: int = DEFAULT_TIMEOUT
    log_file: Optional[str] = None

    @property
    def has_endpoint(self) -> bool:
        return bool(self.host) and self.port is not None

    @classmethod
    def from_mapping(
        cls,
        mapping: Mapping[str, str],
        base: Optional["NodeConfig"] = None
    ) -> "NodeConfig":
        """
        Overlay CORDA_HOST / CORDA_PORT from a configuration mapping.

        Args:
            mapping: Injected configuration, e.g. {"CORDA_HOST": "localhost"}
            base: Settings to start from (defaults to NodeConfig())

        Returns:
            NodeConfig with host/port taken from mapping where present

        Raises:
            ConfigError: If CORDA_PORT is not an integer
        """
        config = base or cls()
        host = mapping.get(HOST_KEY) or config.host
        port = config.port
        if mapping.get(PORT_KEY):
            port = _parse_int(mapping[PORT_KEY], PORT_KEY)
        return replace(config, host=host, port=port)

    @classmethod
    def from_env(
        cls,
        data_dir: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None
    ) -> "NodeConfig":
        """
        Load config.yaml from the data directory, then overlay CORDA_HOST
        and CORDA_PORT from the environment.

        Args:
            data_dir: Override default (or set CORDAHTLC_DATA env var)
            environ: Mapping to read from (defaults to os.environ)
        """
        environ = os.environ if environ is None else environ
        data_dir = data_dir or environ.get("CORDAHTLC_DATA") or DEFAULT_DATA_DIR
        data_dir = os.path.expanduser(data_dir)
        return cls.from_mapping(environ, base=load_config(data_dir))


def _parse_int(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{field_name} must be an integer, got {value!r}")


def load_config(data_dir: str) -> NodeConfig:
    """
    Load node configuration from data_dir/config.yaml.

    Args:
        data_dir: Path to data directory

    Returns:
        NodeConfig with values from file, defaults for missing fields

    Raises:
        ConfigError: If the file is not valid YAML or has bad values
    """
    import yaml

    config_path = os.path.join(data_dir, "config.yaml")
    if not os.path.exists(config_path):
        return NodeConfig()

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping")

    fields: Dict[str, Any] = {}
    if data.get("host"):
        fields["host"] = str(data["host"])
    if data.get("port") is not None:
        fields["port"] = _parse_int(data["port"], "port")
    if data.get("username"):
        fields["username"] = str(data["username"])
    if data.get("password") is not None:
        fields["password"] = str(data["password"])
    if data.get("timeout") is not None:
        fields["timeout"] = _parse_int(data["timeout"], "timeout")
    if data.get("log_file"):
        log_file = data["log_file"]
        if not isinstance(log_file, str):
            raise ConfigError(f"log_file must be a path, got {log_file!r}")
        fields["log_file"] = os.path.join(data_dir, os.path.expanduser(log_file))

    return NodeConfig(**fields)


# -----------------------------------------------------------------------------
# Node Connection
# -----------------------------------------------------------------------------

class NodeRPCConnection:
    """
    One authenticated session against a node's RPC gateway.

    Use the class method to create:
        rpc = NodeRPCConnection.connect(config)
        rpc.post("/htlc/lock", {...})
        rpc.close()

    Or use as context manager:
        with NodeRPCConnection.connect(config) as rpc:
            rpc.get("/htlc/<id>/state")
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize connection (use connect() instead).

        Args:
            base_url: Gateway URL, e.g., "http://localhost:10009"
            username: RPC user
            password: RPC password
            timeout: Request timeout in seconds
            session: Preconfigured requests session (tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = (username, password)
        self.closed = False

    @classmethod
    def connect(cls, config: NodeConfig) -> "NodeRPCConnection":
        """
        Open a session to the node described by config.

        Raises:
            ConfigError: If host/port are not set
            NodeUnavailableError: If the node cannot be reached
            AuthenticationError: If the node rejects the credentials
        """
        if not config.has_endpoint:
            raise ConfigError(f"{HOST_KEY} and {PORT_KEY} must be configured.")

        rpc = cls(
            f"http://{config.host}:{config.port}",
            config.username,
            config.password,
            timeout=config.timeout,
        )
        try:
            rpc.verify()
        except CordaRPCError:
            rpc.close()
            raise
        return rpc

    def close(self):
        """Close the HTTP session."""
        if self.closed:
            return
        self.closed = True
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def verify(self) -> None:
        """
        Check the node is reachable and accepts our credentials.

        Raises:
            AuthenticationError: If the credentials are rejected
            NodeUnavailableError: For any other failed health check
        """
        try:
            self._request("GET", "/health")
        except (RemoteRejectedError, ResponseFormatError) as e:
            raise NodeUnavailableError(f"Node gateway not available: {e}")

    def get(self, path: str) -> dict:
        return self._request("GET", path)

    def post(self, path: str, body: dict) -> dict:
        return self._request("POST", path, body)

    def _request(self, method: str, path: str, body: Optional[dict] = None) -> dict:
        try:
            resp = self.session.request(
                method,
                f"{self.base_url}{path}",
                json=body,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise NodeUnavailableError(f"Failed to connect: {e}")

        if resp.status_code in (401, 403):
            raise AuthenticationError("Node rejected RPC credentials")

        data = self._safe_json(resp)

        if resp.status_code == 404:
            raise ContractNotFoundError(
                data.get("error", f"Not found: {path}"), resp.status_code
            )

        if not 200 <= resp.status_code < 300:
            raise RemoteRejectedError(
                data.get("error", f"{method} {path} failed: HTTP {resp.status_code}"),
                resp.status_code
            )

        if not resp.content:
            return {}

        try:
            data = resp.json()
        except ValueError:
            raise ResponseFormatError(f"Node returned invalid JSON: {resp.text[:200]}")

        if not isinstance(data, dict):
            raise ResponseFormatError(f"Expected a JSON object, got {type(data).__name__}")

        if data.get("error"):
            raise RemoteRejectedError(data["error"], resp.status_code)

        return data

    @staticmethod
    def _safe_json(resp: requests.Response) -> dict:
        """
        Parse an error body, falling back to {} when the node sends plain
        text or nothing.
        """
        if not resp.content:
            return {}
        try:
            data = resp.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}


# -----------------------------------------------------------------------------
# Scoped Acquisition
# -----------------------------------------------------------------------------

ConnectionFactory = Callable[[NodeConfig], NodeRPCConnection]


@contextmanager
def open_connection(
    config: NodeConfig,
    factory: ConnectionFactory = NodeRPCConnection.connect
) -> Iterator[NodeRPCConnection]:
    """
    Acquire a connection and release it on every exit path.

    Args:
        config: Node settings
        factory: Callable that opens the connection

    Yields:
        The open connection; close() is called exactly once afterwards
    """
    rpc = factory(config)
    try:
        yield rpc
    finally:
        rpc.close()
