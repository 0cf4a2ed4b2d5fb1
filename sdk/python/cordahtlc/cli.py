# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2026 cordahtlc Authors

"""
Command-line client for HTLC asset exchange on a Corda node.

Usage:
    cordahtlc get-hash --secret=<secret>
    cordahtlc lock-asset --hashBase64=<hash> --timeout=10 --recipient='O=PartyB,L=London,C=GB' --param=Bond01:a03
    cordahtlc lock-asset --fungible --hashBase64=<hash> --recipient='O=PartyB,L=London,C=GB' --param=Token1:5
    cordahtlc claim-asset --contract-id=<id> --secret=<secret>
    cordahtlc unlock-asset --contract-id=<id>
    cordahtlc is-asset-locked --contract-id=<id>
    cordahtlc get-lock-state --contract-id=<id>

Node address comes from CORDA_HOST / CORDA_PORT, overridden by --host /
--port, on top of ~/.cordahtlc/config.yaml.
"""

import argparse
import enum
import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple

from . import assets
from .htlc_log import log
from .rpc import (
    HOST_KEY,
    PORT_KEY,
    AuthenticationError,
    ConfigError,
    CordaRPCError,
    NodeConfig,
    NodeRPCConnection,
    NodeUnavailableError,
    ConnectionFactory,
    open_connection,
)

DEFAULT_LOCK_TIMEOUT = 10  # seconds

MISSING_ENDPOINT = f"{HOST_KEY} and {PORT_KEY} must be configured."


# -----------------------------------------------------------------------------
# Results
# -----------------------------------------------------------------------------

class ResultKind(enum.Enum):
    OK = "ok"
    USAGE_ERROR = "usage_error"
    CONNECTION_ERROR = "connection_error"
    REMOTE_ERROR = "remote_error"


@dataclass
class CommandResult:
    """Outcome of one command: what kind, and the line printed for it."""
    kind: ResultKind
    message: str
    value: Any = None

    @property
    def ok(self) -> bool:
        return self.kind is ResultKind.OK


class UsageError(Exception):
    """Arguments present but unusable; reported before connecting."""
    pass


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

# A prepared call: receives the open connection (None for local commands)
Call = Callable[[Optional[NodeRPCConnection]], Any]


@dataclass(frozen=True)
class Command:
    name: str
    help: str
    usage: str  # printed when a required argument is missing
    required: Tuple[str, ...]
    prepare: Callable[[argparse.Namespace], Call]
    format: Callable[[Any], str]
    remote: bool = True


def render(value: Any) -> str:
    """Strings as-is; anything else as JSON (so booleans print true/false)."""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _split_param(param: str) -> Tuple[str, str]:
    parts = param.split(":")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise UsageError(
            "Parameter --param must be AssetType:AssetId, "
            "or AssetType:Quantity with --fungible."
        )
    return parts[0], parts[1]


def _prepare_get_hash(args) -> Call:
    return lambda rpc: assets.hash_secret(args.secret)


def _prepare_lock_asset(args) -> Call:
    if args.timeout is None:
        timeout = DEFAULT_LOCK_TIMEOUT
    else:
        try:
            timeout = int(args.timeout)
        except ValueError:
            raise UsageError(f"Timeout must be a whole number of seconds, got {args.timeout!r}.")

    asset_type, second = _split_param(args.param)

    if args.fungible:
        try:
            quantity = int(second)
        except ValueError:
            raise UsageError(f"Quantity must be an integer, got {second!r}.")
        return lambda rpc: assets.create_fungible_htlc(
            rpc,
            asset_type,
            quantity,
            args.recipient,
            args.hash_base64,
            timeout,
            assets.TIME_SPEC_DURATION,
            assets.RETRIEVE_STATE_FLOW,
            assets.DELETE_COMMAND,
        )

    return lambda rpc: assets.create_htlc(
        rpc,
        asset_type,
        second,
        args.recipient,
        args.hash_base64,
        timeout,
        assets.TIME_SPEC_DURATION,
        assets.RETRIEVE_STATE_FLOW,
        assets.DELETE_COMMAND,
    )


def _prepare_claim_asset(args) -> Call:
    return lambda rpc: assets.claim_asset_in_htlc(
        rpc,
        args.contract_id,
        args.secret,
        assets.ISSUE_COMMAND,
        assets.ASSET_CONTRACT_ID,
        assets.UPDATE_OWNER_FLOW,
    )


def _prepare_unlock_asset(args) -> Call:
    return lambda rpc: assets.reclaim_asset_in_htlc(
        rpc,
        args.contract_id,
        assets.ISSUE_COMMAND,
        assets.ASSET_CONTRACT_ID,
    )


def _prepare_is_asset_locked(args) -> Call:
    return lambda rpc: assets.is_asset_locked_in_htlc(rpc, args.contract_id)


def _prepare_get_lock_state(args) -> Call:
    return lambda rpc: assets.read_htlc_state_by_contract_id(rpc, args.contract_id)


_CONTRACT_ID_REQUIRED = "Arguments required: --contract-id."

COMMANDS: Dict[str, Command] = {
    "get-hash": Command(
        name="get-hash",
        help="Generates Hash to be used for HTLC for a given secret.",
        usage="Parameter --secret or -s not given.",
        required=("secret",),
        prepare=_prepare_get_hash,
        format=lambda value: f"Hash in Base64: {value}",
        remote=False,
    ),
    "lock-asset": Command(
        name="lock-asset",
        help="Locks an asset in an HTLC.",
        usage="One of HashBase64, Recipient, or param argument is missing.",
        required=("hash_base64", "recipient", "param"),
        prepare=_prepare_lock_asset,
        format=lambda value: f"HTLC Lock State created with contract ID {value}.",
    ),
    "claim-asset": Command(
        name="claim-asset",
        help="Claim a locked asset. Only Recipient's call will work.",
        usage="Arguments required: --contract-id and --secret.",
        required=("contract_id", "secret"),
        prepare=_prepare_claim_asset,
        format=lambda value: f"Asset Claim Response: {render(value)}",
    ),
    "unlock-asset": Command(
        name="unlock-asset",
        help="Unlocks a locked asset after timeout. Only locker's call will work.",
        usage=_CONTRACT_ID_REQUIRED,
        required=("contract_id",),
        prepare=_prepare_unlock_asset,
        format=lambda value: f"Asset Unlock Response: {render(value)}",
    ),
    "is-asset-locked": Command(
        name="is-asset-locked",
        help="Query lock status of an asset, given contractId.",
        usage=_CONTRACT_ID_REQUIRED,
        required=("contract_id",),
        prepare=_prepare_is_asset_locked,
        format=lambda value: f"Is Asset Locked Response: {render(value)}",
    ),
    "get-lock-state": Command(
        name="get-lock-state",
        help="Fetch HTLC State associated with contractId.",
        usage=_CONTRACT_ID_REQUIRED,
        required=("contract_id",),
        prepare=_prepare_get_lock_state,
        format=lambda value: f"Response: {render(value)}",
    ),
}


def run_command(
    command: Command,
    args: argparse.Namespace,
    config: NodeConfig,
    connect: ConnectionFactory = NodeRPCConnection.connect
) -> CommandResult:
    """
    Validate arguments, then open a connection, make one remote call and
    close the connection again.

    Args:
        command: Entry from COMMANDS
        args: Parsed options for that command
        config: Node settings
        connect: Connection factory (never called on usage errors)

    Returns:
        CommandResult; its message is the line to print
    """
    if any(getattr(args, name, None) is None for name in command.required):
        return CommandResult(ResultKind.USAGE_ERROR, command.usage)

    try:
        call = command.prepare(args)
    except UsageError as e:
        return CommandResult(ResultKind.USAGE_ERROR, str(e))

    if not command.remote:
        value = call(None)
        return CommandResult(ResultKind.OK, command.format(value), value)

    if not config.has_endpoint:
        return CommandResult(ResultKind.USAGE_ERROR, MISSING_ENDPOINT)

    try:
        with open_connection(config, connect) as rpc:
            value = call(rpc)
    except (NodeUnavailableError, AuthenticationError, ConfigError) as e:
        result = CommandResult(ResultKind.CONNECTION_ERROR, f"Error: {e}")
    except CordaRPCError as e:
        result = CommandResult(ResultKind.REMOTE_ERROR, f"Error: {e}")
    except Exception as e:
        result = CommandResult(ResultKind.REMOTE_ERROR, f"Error: {e!r}")
    else:
        result = CommandResult(ResultKind.OK, command.format(value), value)

    log(config.log_file, command.name, result.message)
    return result


# -----------------------------------------------------------------------------
# Argument Parsing
# -----------------------------------------------------------------------------

def _add_contract_id(parser: argparse.ArgumentParser):
    parser.add_argument("-cid", "--contract-id", dest="contract_id",
                        help="Contract/Linear Id for HTLC State")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cordahtlc",
        description="HTLC asset exchange client for a Corda node's RPC gateway.",
    )
    parser.add_argument("--host", default=None,
                        help=f"Node host (env: {HOST_KEY})")
    parser.add_argument("--port", type=int, default=None,
                        help=f"Node RPC gateway port (env: {PORT_KEY})")
    parser.add_argument("--data-dir", default=None, metavar="PATH",
                        help="Directory holding config.yaml (env: CORDAHTLC_DATA, "
                             "default: ~/.cordahtlc)")

    subparsers = parser.add_subparsers(dest="command")

    def add(name: str) -> argparse.ArgumentParser:
        return subparsers.add_parser(name, help=COMMANDS[name].help)

    p_hash = add("get-hash")
    p_hash.add_argument("-s", "--secret", help="String to be hashed")

    p_lock = add("lock-asset")
    p_lock.add_argument("-h64", "--hashBase64", dest="hash_base64",
                        help="Hash in base64 for HTLC")
    p_lock.add_argument("-t", "--timeout",
                        help=f"Timeout duration in seconds (default {DEFAULT_LOCK_TIMEOUT})")
    p_lock.add_argument("-r", "--recipient", help="Party Name for recipient")
    p_lock.add_argument("-f", "--fungible", action="store_true",
                        help="Fungible asset lock")
    p_lock.add_argument("-p", "--param",
                        help="AssetType:AssetId for non-fungible, "
                             "AssetType:Quantity for fungible")

    p_claim = add("claim-asset")
    _add_contract_id(p_claim)
    p_claim.add_argument("-s", "--secret", help="Hash Pre-Image for the HTLC Claim")

    for name in ("unlock-asset", "is-asset-locked", "get-lock-state"):
        _add_contract_id(add(name))

    return parser


def load_node_config(
    args: argparse.Namespace,
    environ: Optional[Mapping[str, str]] = None
) -> NodeConfig:
    """config.yaml, then CORDA_HOST/CORDA_PORT, then --host/--port."""
    config = NodeConfig.from_env(data_dir=args.data_dir, environ=environ)
    overrides = {}
    if args.host:
        overrides[HOST_KEY] = args.host
    if args.port is not None:
        overrides[PORT_KEY] = str(args.port)
    return NodeConfig.from_mapping(overrides, base=config)


def main(
    argv: Optional[Sequence[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    connect: ConnectionFactory = NodeRPCConnection.connect
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    command = COMMANDS[args.command]

    # Local commands never read node settings
    config = NodeConfig()
    if command.remote:
        try:
            config = load_node_config(args, environ)
        except ConfigError as e:
            print(f"Error: {e}")
            return 0

    result = run_command(command, args, config, connect)
    print(result.message)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
