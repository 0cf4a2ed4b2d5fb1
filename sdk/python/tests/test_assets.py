import base64
import hashlib

import pytest

from cordahtlc import assets
from cordahtlc.rpc import ResponseFormatError


def test_hash_secret_is_base64_sha256():
    assert assets.hash_secret("abc") == "ungWv48Bz+pBQUDeXa4iI7ADYaOWF3qctBD/YfIAFa0="


def test_hash_secret_encodes_utf8():
    expected = base64.b64encode(hashlib.sha256("sécret".encode("utf-8")).digest()).decode()
    assert assets.hash_secret("sécret") == expected


def test_create_htlc_posts_lock_request(rpc):
    cid = assets.create_htlc(rpc, "Bond01", "a03", "PartyB", "H", 10)

    assert cid == "cid-1"
    path, body = rpc.post.call_args.args
    assert path == "/htlc/lock"
    assert body == {
        "assetType": "Bond01",
        "assetId": "a03",
        "recipient": "PartyB",
        "hashBase64": "H",
        "expiryTime": 10,
        "timeSpec": assets.TIME_SPEC_DURATION,
        "getAssetFlow": assets.RETRIEVE_STATE_FLOW,
        "deleteAssetCommand": assets.DELETE_COMMAND,
    }


def test_create_fungible_htlc_sends_integer_quantity(rpc):
    assets.create_fungible_htlc(rpc, "Token", 5, "PartyB", "H", 10)

    path, body = rpc.post.call_args.args
    assert path == "/htlc/lock-fungible"
    assert body["tokenType"] == "Token"
    assert body["quantity"] == 5


def test_lock_without_contract_id_is_format_error(rpc):
    rpc.post.return_value = {}
    with pytest.raises(ResponseFormatError):
        assets.create_htlc(rpc, "Bond01", "a03", "PartyB", "H", 10)


def test_claim_sends_preimage_and_returns_result(rpc):
    rpc.post.return_value = {"result": "tx-99"}

    res = assets.claim_asset_in_htlc(rpc, "cid-1", "secret")

    assert res == "tx-99"
    path, body = rpc.post.call_args.args
    assert path == "/htlc/cid-1/claim"
    assert body["hashPreimage"] == "secret"
    assert body["createAssetCommand"] == assets.ISSUE_COMMAND
    assert body["assetContractId"] == assets.ASSET_CONTRACT_ID
    assert body["updateOwnerFlow"] == assets.UPDATE_OWNER_FLOW


def test_reclaim_posts_to_reclaim(rpc):
    rpc.post.return_value = {"result": True}

    assert assets.reclaim_asset_in_htlc(rpc, "cid-1") is True
    assert rpc.post.call_args.args[0] == "/htlc/cid-1/reclaim"


def test_contract_id_is_escaped_in_path(rpc):
    assets.is_asset_locked_in_htlc(rpc, "a/b c")
    rpc.get.assert_called_once_with("/htlc/a%2Fb%20c/locked")


def test_is_locked_requires_boolean(rpc):
    rpc.get.return_value = {"locked": "yes"}
    with pytest.raises(ResponseFormatError):
        assets.is_asset_locked_in_htlc(rpc, "cid-1")


def test_read_state_returns_state(rpc):
    assert assets.read_htlc_state_by_contract_id(rpc, "cid-1") == {"lockInfo": "x"}
    rpc.get.assert_called_once_with("/htlc/cid-1/state")


def test_read_state_missing_is_format_error(rpc):
    rpc.get.return_value = {}
    with pytest.raises(ResponseFormatError):
        assets.read_htlc_state_by_contract_id(rpc, "cid-1")
