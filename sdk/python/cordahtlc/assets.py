# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2026 cordahtlc Authors

"""
HTLC asset operations against a node's RPC gateway.

Each function takes an open NodeRPCConnection and performs exactly one
remote call. Lock/claim/reclaim semantics are enforced by the node; the
functions only shape requests and decode responses.

Usage:
    from cordahtlc import NodeConfig, open_connection, assets

    with open_connection(NodeConfig.from_env()) as rpc:
        cid = assets.create_htlc(
            rpc, "Bond01", "a03", "O=PartyB,L=London,C=GB",
            assets.hash_secret("secret"), 600,
        )
        print(assets.is_asset_locked_in_htlc(rpc, cid))
"""

import base64
import hashlib
from typing import Any
from urllib.parse import quote

from .rpc import NodeRPCConnection, ResponseFormatError


# -----------------------------------------------------------------------------
# Contract Constants
# -----------------------------------------------------------------------------

# Flow the node runs to fetch the asset being locked
RETRIEVE_STATE_FLOW = "com.cordaSimpleApplication.flow.RetrieveStateAndRef"

# Flow the node runs to transfer ownership once a claim succeeds
UPDATE_OWNER_FLOW = "com.cordaSimpleApplication.flow.UpdateAssetOwnerFromPointer"

ASSET_CONTRACT_ID = "com.cordaSimpleApplication.contract.AssetContract"
ISSUE_COMMAND = f"{ASSET_CONTRACT_ID}$Commands$Issue"
DELETE_COMMAND = f"{ASSET_CONTRACT_ID}$Commands$Delete"

# Timeout interpretation: 0 = absolute epoch seconds, 1 = duration from now
TIME_SPEC_EPOCH = 0
TIME_SPEC_DURATION = 1


# -----------------------------------------------------------------------------
# Hashing
# -----------------------------------------------------------------------------

def hash_secret(secret: str) -> str:
    """Return base64(sha256(secret)) for an HTLC pre-image."""
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return base64.b64encode(digest).decode()


# -----------------------------------------------------------------------------
# Lock
# -----------------------------------------------------------------------------

def create_htlc(
    rpc: NodeRPCConnection,
    asset_type: str,
    asset_id: str,
    recipient: str,
    hash_base64: str,
    expiry_time: int,
    time_spec: int = TIME_SPEC_DURATION,
    get_asset_flow: str = RETRIEVE_STATE_FLOW,
    delete_command: str = DELETE_COMMAND,
) -> str:
    """
    Lock a non-fungible asset in an HTLC.

    Args:
        rpc: Open node connection
        asset_type: Asset type, e.g. "Bond01"
        asset_id: Identifier of the asset instance
        recipient: Party allowed to claim, e.g. "O=PartyB,L=London,C=GB"
        hash_base64: Base64 SHA-256 hash of the pre-image
        expiry_time: Seconds (duration) or epoch seconds, per time_spec
        time_spec: TIME_SPEC_DURATION or TIME_SPEC_EPOCH
        get_asset_flow: Flow the node uses to look up the asset
        delete_command: Contract command consuming the asset state

    Returns:
        Contract (linear) id of the created lock state
    """
    data = rpc.post("/htlc/lock", {
        "assetType": asset_type,
        "assetId": asset_id,
        "recipient": recipient,
        "hashBase64": hash_base64,
        "expiryTime": expiry_time,
        "timeSpec": time_spec,
        "getAssetFlow": get_asset_flow,
        "deleteAssetCommand": delete_command,
    })
    return _contract_id(data)


def create_fungible_htlc(
    rpc: NodeRPCConnection,
    token_type: str,
    quantity: int,
    recipient: str,
    hash_base64: str,
    expiry_time: int,
    time_spec: int = TIME_SPEC_DURATION,
    get_asset_flow: str = RETRIEVE_STATE_FLOW,
    delete_command: str = DELETE_COMMAND,
) -> str:
    """
    Lock a quantity of a fungible token in an HTLC.

    Same as create_htlc() but the asset is identified by token type and
    quantity instead of an instance id.
    """
    data = rpc.post("/htlc/lock-fungible", {
        "tokenType": token_type,
        "quantity": quantity,
        "recipient": recipient,
        "hashBase64": hash_base64,
        "expiryTime": expiry_time,
        "timeSpec": time_spec,
        "getAssetFlow": get_asset_flow,
        "deleteAssetCommand": delete_command,
    })
    return _contract_id(data)


def _contract_id(data: dict) -> str:
    contract_id = data.get("contractId")
    if not isinstance(contract_id, str) or not contract_id:
        raise ResponseFormatError("Lock response carried no contractId")
    return contract_id


# -----------------------------------------------------------------------------
# Claim / Reclaim
# -----------------------------------------------------------------------------

def claim_asset_in_htlc(
    rpc: NodeRPCConnection,
    contract_id: str,
    secret: str,
    create_command: str = ISSUE_COMMAND,
    asset_contract_id: str = ASSET_CONTRACT_ID,
    update_owner_flow: str = UPDATE_OWNER_FLOW,
) -> Any:
    """
    Claim a locked asset by revealing the pre-image.

    Only the recipient's node can claim; the node checks the hash and
    that the lock has not expired.

    Returns:
        The node's claim result (implementation-defined)
    """
    data = rpc.post(f"{_lock_path(contract_id)}/claim", {
        "hashPreimage": secret,
        "createAssetCommand": create_command,
        "assetContractId": asset_contract_id,
        "updateOwnerFlow": update_owner_flow,
    })
    return data.get("result")


def reclaim_asset_in_htlc(
    rpc: NodeRPCConnection,
    contract_id: str,
    create_command: str = ISSUE_COMMAND,
    asset_contract_id: str = ASSET_CONTRACT_ID,
) -> Any:
    """
    Return a locked asset to the locker once the lock has expired.

    No local expiry check is made; the node refuses early reclaims.
    """
    data = rpc.post(f"{_lock_path(contract_id)}/reclaim", {
        "createAssetCommand": create_command,
        "assetContractId": asset_contract_id,
    })
    return data.get("result")


# -----------------------------------------------------------------------------
# Queries
# -----------------------------------------------------------------------------

def is_asset_locked_in_htlc(rpc: NodeRPCConnection, contract_id: str) -> bool:
    data = rpc.get(f"{_lock_path(contract_id)}/locked")
    locked = data.get("locked")
    if not isinstance(locked, bool):
        raise ResponseFormatError(f"Expected boolean 'locked', got {locked!r}")
    return locked


def read_htlc_state_by_contract_id(rpc: NodeRPCConnection, contract_id: str) -> Any:
    data = rpc.get(f"{_lock_path(contract_id)}/state")
    if "state" not in data:
        raise ResponseFormatError("State response carried no 'state'")
    return data["state"]


def _lock_path(contract_id: str) -> str:
    return f"/htlc/{quote(contract_id, safe='')}"
