#!/usr/bin/env python3
"""
Lock an asset for a counterparty, then check the lock.

Setup:
    1. Create data directory: mkdir -p ~/.cordahtlc
    2. Create config.yaml (see below), or export CORDA_HOST / CORDA_PORT
    3. Optional: export CORDAHTLC_DATA=/custom/path

Example config.yaml (PartyA's gateway):
    host: localhost
    port: 10009
    username: clientUser1
    password: test

Prerequisites:
    - The asset (ASSET_TYPE, ASSET_ID) must be owned by the calling party
    - RECIPIENT claims from their own node with:
          cordahtlc claim-asset --contract-id=<id> --secret=<SECRET>
"""

from cordahtlc import NodeConfig, open_connection, hash_secret
from cordahtlc import assets

ASSET_TYPE = "t1"
ASSET_ID = "a01"

RECIPIENT = "O=PartyB,L=London,C=GB"

# Revealed to the recipient out of band once the lock is confirmed
SECRET = "my_secret_preimage"

LOCK_SECONDS = 300


def main():
    config = NodeConfig.from_env()
    hash_base64 = hash_secret(SECRET)
    print(f"Hash in Base64: {hash_base64}")

    with open_connection(config) as rpc:
        contract_id = assets.create_htlc(
            rpc, ASSET_TYPE, ASSET_ID, RECIPIENT, hash_base64, LOCK_SECONDS
        )
        print(f"Locked: {contract_id}")

        print(f"Locked now: {assets.is_asset_locked_in_htlc(rpc, contract_id)}")
        print(f"State: {assets.read_htlc_state_by_contract_id(rpc, contract_id)}")

    print(f"After {LOCK_SECONDS}s the lock can be reclaimed with:")
    print(f"  cordahtlc unlock-asset --contract-id={contract_id}")


if __name__ == "__main__":
    main()
