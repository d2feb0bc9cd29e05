#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Emulate the ledger gateway: token-metadata records for NFTs and collections.
#
# Speaks the same JSON-RPC methods as the real gateway, see transport.py.
#
import inspect, itertools
from dataclasses import dataclass, asdict
from .constants import *
from .compat import sha256s, CT_pick_keypair, CT_sig_verify
from .utils import b58, unb58, canonical_json

# placeholder, but required param
REQUIRED = object()

# provides msg+code number
class RPCErrorCode(RuntimeError):
    def __init__(self, msg, code):
        self.code = code
        super().__init__(msg)

@dataclass
class AssetRecord:
    '''
        Info we store for each minted asset (mint + metadata account)
    '''
    address: str
    mint: str
    name: str
    symbol: str
    uri: str
    sellerFeeBasisPoints: int
    updateAuthority: str
    isCollection: bool = False
    collection: str = None
    verified: bool = False
    collectionSize: int = 0

    def as_json(self):
        return asdict(self)

@dataclass
class TxnRecord:
    signature: str
    slot: int
    polls_left: int         # how many status polls before it is finalized
    err: str = None

class LedgerState:
    #
    # All the state of our pretend chain.
    #
    def __init__(self, finality_polls=0):
        self.assets = {}            # address => AssetRecord
        self.txns = {}              # signature => TxnRecord
        self.log = []               # (method, signer) for every request seen
        self.slot = itertools.count(1000)

        # number of getSignatureStatuses calls before a txn shows as finalized
        self.finality_polls = finality_polls

    def __repr__(self):
        return '<LedgerState: %d assets, %d txns>' % (len(self.assets), len(self.txns))

    def handle(self, msg, signer, signature):
        # process one JSON-RPC request, return response dict
        rid = msg.get('id')
        method = msg.get('method', '')
        params = msg.get('params') or {}

        self.log.append((method, signer))
        fcn = getattr(self, 'cmd_' + method, None)
        try:
            if not fcn:
                raise RPCErrorCode(f"Method not found: {method}", RPC_METHOD_NOT_FOUND)

            chk = canonical_json(dict(method=method, params=params))
            try:
                ok = bool(signer and signature) and \
                        CT_sig_verify(unb58(signer, 32), chk, unb58(signature, 64))
            except ValueError:
                ok = False
            if not ok:
                raise RPCErrorCode("Bad request signature", RPC_BAD_SIGNATURE)

            missing = [k for k, p in inspect.signature(fcn).parameters.items()
                            if p.default is REQUIRED and k not in params]
            if missing:
                raise RPCErrorCode("Missing param: " + ', '.join(missing), RPC_INVALID_PARAMS)

            result = fcn(signer, **params)

            return dict(jsonrpc='2.0', id=rid, result=result)

        except RPCErrorCode as exc:
            return dict(jsonrpc='2.0', id=rid, error=dict(code=exc.code, message=str(exc)))

    def _new_txn(self):
        _, fake = CT_pick_keypair()
        sig = b58(sha256s(fake) + fake)
        t = TxnRecord(signature=sig, slot=next(self.slot), polls_left=self.finality_polls)
        self.txns[sig] = t
        return sig

    def _get(self, address):
        try:
            return self.assets[address]
        except KeyError:
            raise RPCErrorCode(f"Account not found: {address}", RPC_NOT_FOUND)

    def members(self, collection):
        # verified members only
        return [a.address for a in self.assets.values()
                    if a.collection == collection and a.verified]

    def cmd_createNft(self, signer, name=REQUIRED, symbol=REQUIRED, uri=REQUIRED,
                        sellerFeeBasisPoints=REQUIRED, isCollection=False,
                        collection=None, collectionAuthority=None, **unused):
        if len(name) > MAX_NAME_LENGTH:
            raise RPCErrorCode(f"Name too long: {name}", RPC_TX_REJECTED)
        if len(symbol) > MAX_SYMBOL_LENGTH:
            raise RPCErrorCode(f"Symbol too long: {symbol}", RPC_TX_REJECTED)
        if not uri or len(uri) > MAX_URI_LENGTH:
            raise RPCErrorCode("URI missing or too long", RPC_TX_REJECTED)
        if not isinstance(sellerFeeBasisPoints, int) \
                or not (0 <= sellerFeeBasisPoints <= MAX_BASIS_POINTS):
            raise RPCErrorCode("Invalid basis points", RPC_TX_REJECTED)

        if collection is not None:
            parent = self._get(collection)
            if not parent.isCollection:
                raise RPCErrorCode(f"Not a collection: {collection}", RPC_TX_REJECTED)
            if isCollection:
                raise RPCErrorCode("Nested collections not supported", RPC_TX_REJECTED)

        # new mint account, and metadata account derived from it
        _, mint_pub = CT_pick_keypair()
        mint = b58(mint_pub)
        address = b58(sha256s(b'metadata' + mint_pub))

        rec = AssetRecord(address=address, mint=mint, name=name, symbol=symbol, uri=uri,
                            sellerFeeBasisPoints=sellerFeeBasisPoints,
                            updateAuthority=(collectionAuthority or signer) if isCollection else signer,
                            isCollection=bool(isCollection), collection=collection)
        self.assets[address] = rec

        return dict(signature=self._new_txn(), asset=rec.as_json())

    def cmd_verifyCollection(self, signer, address=REQUIRED, collection=REQUIRED, **unused):
        child = self._get(address)
        parent = self._get(collection)

        if signer != parent.updateAuthority:
            raise RPCErrorCode("Signer is not the collection authority", RPC_NOT_AUTHORITY)
        if child.collection != collection:
            raise RPCErrorCode("Asset does not point at that collection", RPC_NOT_AUTHORITY)

        if not child.verified:
            child.verified = True
            parent.collectionSize += 1

        return dict(signature=self._new_txn())

    def cmd_findByAddress(self, signer, address=REQUIRED, **unused):
        return self._get(address).as_json()

    def cmd_updateNft(self, signer, address=REQUIRED, uri=REQUIRED, **unused):
        rec = self._get(address)

        if signer != rec.updateAuthority:
            raise RPCErrorCode("Signer is not the update authority", RPC_TX_REJECTED)
        if not uri or len(uri) > MAX_URI_LENGTH:
            raise RPCErrorCode("URI missing or too long", RPC_TX_REJECTED)

        rec.uri = uri

        return dict(signature=self._new_txn())

    def cmd_getCollectionMembers(self, signer, collection=REQUIRED, **unused):
        self._get(collection)
        return self.members(collection)

    def cmd_getSignatureStatuses(self, signer, signatures=REQUIRED, **unused):
        # same shape as the Solana RPC method
        rv = []
        for sig in signatures:
            t = self.txns.get(sig)
            if not t:
                rv.append(None)
                continue

            if t.polls_left > 0:
                t.polls_left -= 1
                status = 'confirmed'
            else:
                status = 'finalized'

            rv.append(dict(slot=t.slot, confirmationStatus=status, err=t.err,
                            confirmations=(None if status == 'finalized' else 1)))

        return dict(context=dict(slot=max(t.slot for t in self.txns.values()) if self.txns else 0),
                    value=rv)

# EOF
