#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# ledger.py
#
# Higher-level ledger operations for NFTs and collections. Every mutating call
# is one transaction, and we wait for the commitment level before returning.
#
import time
from .constants import *
from .exceptions import *
from .model import TransactionReceipt, asset_from_json
from .utils import b58, canonical_json

# RPC error code => what we raise
ERROR_CLASSES = {
    RPC_TX_REJECTED: TransactionRejected,
    RPC_INVALID_PARAMS: TransactionRejected,
    RPC_BAD_SIGNATURE: TransactionRejected,
    RPC_NOT_FOUND: AssetNotFound,
    RPC_NOT_AUTHORITY: VerificationRejected,
}

class LedgerClient:
    #
    # Call methods on this instance to get work done. Wants a transport and
    # the identity that signs everything.
    #
    def __init__(self, transport, identity, commitment=DEFAULT_COMMITMENT,
                        timeout=FINALITY_TIMEOUT, poll_interval=POLL_INTERVAL):
        assert commitment in COMMITMENT_LEVELS, commitment
        self.tr = transport
        self.identity = identity
        self.commitment = commitment
        self.timeout = timeout
        self.poll_interval = poll_interval

    def __repr__(self):
        return '<%s %s via %s>' % (self.__class__.__name__, self.identity.address, self.tr.name)

    def close(self):
        self.tr.close()

    def send(self, method, **params):
        # Sign and send request, give back the result or raise
        params = {k: v for k, v in params.items() if v is not None}
        sig = self.identity.sign(canonical_json(dict(method=method, params=params)))

        resp = self.tr.send(method, params, signer=self.identity.address, signature=b58(sig))

        if 'error' in resp:
            err = resp['error'] or {}
            msg = err.get('message', 'Unknown error')
            code = err.get('code', 500)
            cls = ERROR_CLASSES.get(code, LedgerError)
            raise cls(f'{code} on {method}: {msg}', code, msg)

        return resp['result']

    def wait_for_commitment(self, signature, commitment=None):
        # Poll until the transaction reaches the commitment level.
        # - returns TransactionReceipt
        commitment = commitment or self.commitment
        want = COMMITMENT_LEVELS.index(commitment)
        deadline = time.monotonic() + self.timeout

        while 1:
            st = self.send('getSignatureStatuses', signatures=[signature])['value'][0]

            if st:
                if st.get('err'):
                    raise TransactionRejected(f"Transaction failed: {st['err']}",
                                                RPC_TX_REJECTED, str(st['err']))

                # unknown levels count as not there yet
                got = st.get('confirmationStatus') or 'processed'
                if got in COMMITMENT_LEVELS and COMMITMENT_LEVELS.index(got) >= want:
                    return TransactionReceipt(signature, st.get('slot'), got)

            if time.monotonic() >= deadline:
                raise TransactionTimeout(f"Not {commitment} after {self.timeout}s: {signature}")

            time.sleep(self.poll_interval)

    def create_asset(self, spec, uri, collection=None):
        # Mint an NFT (or collection NFT) pointing at uri
        # - collection is the address of an existing collection; this only
        #   binds the pointer, verify_collection_membership() must follow
        args = dict(name=spec.name, symbol=spec.symbol, uri=uri,
                    sellerFeeBasisPoints=spec.royalty_bps)

        if spec.is_collection:
            assert collection is None, "collections cannot be in a collection"
            args.update(isCollection=True, collectionAuthority=spec.authority.address)
        else:
            args.update(collection=collection)

        rr = self.send('createNft', **args)
        asset = asset_from_json(rr['asset'])

        try:
            self.wait_for_commitment(rr['signature'])
        except TransactionTimeout as exc:
            # it was submitted, so caller must wait on this, not mint again
            exc.signature = rr['signature']
            exc.asset = asset
            raise

        return asset

    def verify_collection_membership(self, child_address, collection_address):
        # Attest child is in collection. Only the collection authority can.
        rr = self.send('verifyCollection', address=child_address, collection=collection_address)
        return self.wait_for_commitment(rr['signature'])

    def find_asset_by_address(self, address):
        return asset_from_json(self.send('findByAddress', address=address))

    def update_metadata_uri(self, asset, new_uri):
        # Point existing asset at a new metadata document
        rr = self.send('updateNft', address=asset.address, uri=new_uri)
        return self.wait_for_commitment(rr['signature'])

    def collection_members(self, collection_address):
        # addresses of verified members only
        return list(self.send('getCollectionMembers', collection=collection_address))

# EOF
