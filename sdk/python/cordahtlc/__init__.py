# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2026 cordahtlc Authors

"""
cordahtlc - HTLC asset exchange against a Corda node's RPC gateway

Data directory: ~/.cordahtlc (override with CORDAHTLC_DATA)

Usage:
    from cordahtlc import NodeConfig, open_connection, hash_secret
    from cordahtlc import assets

    config = NodeConfig.from_env()  # config.yaml + CORDA_HOST/CORDA_PORT
    with open_connection(config) as rpc:
        cid = assets.create_htlc(rpc, "Bond01", "a03", "O=PartyB,L=London,C=GB",
                                 hash_secret("secret"), 600)

Command line:
    cordahtlc get-hash --secret=<secret>
"""

from . import assets
from .assets import (
    hash_secret,
    create_htlc,
    create_fungible_htlc,
    claim_asset_in_htlc,
    reclaim_asset_in_htlc,
    is_asset_locked_in_htlc,
    read_htlc_state_by_contract_id,
)
from .rpc import (
    # Connection
    NodeRPCConnection,
    open_connection,

    # Configuration
    NodeConfig,
    load_config,

    # Exceptions
    CordaRPCError,
    ConfigError,
    AuthenticationError,
    NodeUnavailableError,
    RemoteRejectedError,
    ContractNotFoundError,
    ResponseFormatError,
)

__version__ = "0.1.0"
__all__ = [
    "assets",

    # Asset operations
    "hash_secret",
    "create_htlc",
    "create_fungible_htlc",
    "claim_asset_in_htlc",
    "reclaim_asset_in_htlc",
    "is_asset_locked_in_htlc",
    "read_htlc_state_by_contract_id",

    # Connection
    "NodeRPCConnection",
    "open_connection",

    # Configuration
    "NodeConfig",
    "load_config",

    # Exceptions
    "CordaRPCError",
    "ConfigError",
    "AuthenticationError",
    "NodeUnavailableError",
    "RemoteRejectedError",
    "ContractNotFoundError",
    "ResponseFormatError",
]
