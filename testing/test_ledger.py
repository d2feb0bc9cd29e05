#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Ledger client against the emulated ledger.
#
import pytest
from nftpub.constants import *
from nftpub.exceptions import *
from nftpub.emulator import LedgerState, REQUIRED
from nftpub.identity import Keypair
from nftpub.ledger import LedgerClient
from nftpub.model import AssetSpec, CollectionAssetSpec, OnChainAsset
from nftpub.transport import EmulatorTransport, LedgerTransportABC

def methods(chain, name):
    return [m for m, _ in chain.log if m == name]

@pytest.fixture
def specs(user):
    coll = CollectionAssetSpec('TestCollectionNFT', 'TEST', 'coll', 100, 'success.png', user)
    nft = AssetSpec('My NFT', 'SYMBOL', 'This is my NFT', 0, 'solana.png')
    return coll, nft

def test_create(ledger, chain, user, specs):
    coll_spec, nft_spec = specs

    coll = ledger.create_asset(coll_spec, 'memory://coll')
    assert isinstance(coll, OnChainAsset)
    assert coll.is_collection
    assert coll.update_authority == user.address
    assert coll.collection is None
    assert coll.address != coll.mint

    nft = ledger.create_asset(nft_spec, 'memory://nft', collection=coll.address)
    assert not nft.is_collection
    assert nft.collection == coll.address
    assert not nft.verified
    assert nft.royalty_bps == 0
    assert nft.uri == 'memory://nft'

    # bound but not a member yet
    assert ledger.collection_members(coll.address) == []

    assert ledger.find_asset_by_address(nft.address) == nft
    assert len(chain.txns) == 2

def test_verify(ledger, chain, specs):
    coll_spec, nft_spec = specs
    coll = ledger.create_asset(coll_spec, 'memory://coll')
    nft = ledger.create_asset(nft_spec, 'memory://nft', collection=coll.address)

    rcpt = ledger.verify_collection_membership(nft.address, coll.address)
    assert rcpt.commitment == 'finalized'
    assert rcpt.signature in chain.txns

    assert ledger.collection_members(coll.address) == [nft.address]
    assert ledger.find_asset_by_address(nft.address).verified
    assert chain.assets[coll.address].collectionSize == 1

    # again: no change to the count
    ledger.verify_collection_membership(nft.address, coll.address)
    assert chain.assets[coll.address].collectionSize == 1

def test_verify_not_authority(chain, user, specs):
    coll_spec, nft_spec = specs
    mine = LedgerClient(EmulatorTransport(chain), user, poll_interval=0)
    coll = mine.create_asset(coll_spec, 'memory://coll')
    nft = mine.create_asset(nft_spec, 'memory://nft', collection=coll.address)

    other = LedgerClient(EmulatorTransport(chain), Keypair.generate(), poll_interval=0)
    with pytest.raises(VerificationRejected) as ee:
        other.verify_collection_membership(nft.address, coll.address)
    assert ee.value.code == RPC_NOT_AUTHORITY

    # still exists, but is not a member
    assert mine.find_asset_by_address(nft.address).address == nft.address
    assert mine.collection_members(coll.address) == []

def test_delegated_collection_authority(ledger, chain, user):
    # collection authority named in the spec, not the signer
    boss = Keypair.generate()
    coll = ledger.create_asset(CollectionAssetSpec('C', 'TEST', 'd', 0, 'x.png', boss), 'memory://c')
    assert coll.update_authority == boss.address

    nft = ledger.create_asset(AssetSpec('N', 'S', 'd', 0, 'y.png'), 'memory://n', collection=coll.address)
    with pytest.raises(VerificationRejected):
        ledger.verify_collection_membership(nft.address, coll.address)

    theirs = LedgerClient(EmulatorTransport(chain), boss, poll_interval=0)
    theirs.verify_collection_membership(nft.address, coll.address)
    assert ledger.collection_members(coll.address) == [nft.address]

def test_not_found(ledger, specs):
    with pytest.raises(AssetNotFound):
        ledger.find_asset_by_address('11111111111111111111111111111111')

    coll = ledger.create_asset(specs[0], 'memory://coll')
    with pytest.raises(AssetNotFound):
        ledger.verify_collection_membership('NoSuchAddress', coll.address)
    with pytest.raises(AssetNotFound):
        ledger.create_asset(specs[1], 'memory://nft', collection='NoSuchAddress')

def test_rejected(ledger, specs):
    nft_spec = specs[1]

    with pytest.raises(TransactionRejected):
        ledger.create_asset(nft_spec._replace(name='x'*(MAX_NAME_LENGTH+1)), 'memory://nft')
    with pytest.raises(TransactionRejected):
        ledger.create_asset(nft_spec._replace(symbol='x'*(MAX_SYMBOL_LENGTH+1)), 'memory://nft')
    with pytest.raises(TransactionRejected):
        ledger.create_asset(nft_spec, 'memory://' + 'x'*MAX_URI_LENGTH)

    # can't put an NFT in something that is not a collection
    plain = ledger.create_asset(nft_spec, 'memory://nft')
    with pytest.raises(TransactionRejected):
        ledger.create_asset(nft_spec, 'memory://nft2', collection=plain.address)

def test_update_last_write_wins(ledger, chain, specs):
    nft = ledger.create_asset(specs[1], 'memory://v1')

    r1 = ledger.update_metadata_uri(nft, 'memory://v2')
    r2 = ledger.update_metadata_uri(nft, 'memory://v2')
    assert r1.signature != r2.signature

    got = ledger.find_asset_by_address(nft.address)
    assert got.uri == 'memory://v2'
    assert got.address == nft.address
    assert got.mint == nft.mint
    assert len(methods(chain, 'updateNft')) == 2

def test_update_wrong_signer(ledger, chain, specs):
    nft = ledger.create_asset(specs[1], 'memory://v1')
    other = LedgerClient(EmulatorTransport(chain), Keypair.generate(), poll_interval=0)

    with pytest.raises(TransactionRejected):
        other.update_metadata_uri(nft, 'memory://evil')

    assert ledger.find_asset_by_address(nft.address).uri == 'memory://v1'

def test_finality_timeout(user, specs):
    chain = LedgerState(finality_polls=1000)
    ledger = LedgerClient(EmulatorTransport(chain), user, timeout=0, poll_interval=0)

    with pytest.raises(TransactionTimeout) as ee:
        ledger.create_asset(specs[1], 'memory://nft')

    # but it did happen, it's just not final yet
    assert len(chain.assets) == 1
    assert ee.value.asset.address in chain.assets
    assert ee.value.signature in chain.txns

    # weaker commitment level is ok
    ledger.commitment = 'confirmed'
    nft = ledger.create_asset(specs[1], 'memory://nft')
    rcpt = ledger.update_metadata_uri(nft, 'memory://v2')
    assert rcpt.commitment == 'confirmed'

def test_finality_waits(user, specs):
    chain = LedgerState(finality_polls=3)
    ledger = LedgerClient(EmulatorTransport(chain), user, poll_interval=0)

    ledger.create_asset(specs[1], 'memory://nft')
    assert len(methods(chain, 'getSignatureStatuses')) == 4

class OddStatusLedger(LedgerState):
    # reports a commitment level we have never heard of
    def cmd_getSignatureStatuses(self, signer, signatures=REQUIRED, **unused):
        rv = super().cmd_getSignatureStatuses(signer, signatures=signatures)
        for st in rv['value']:
            if st:
                st['confirmationStatus'] = 'rooted'
        return rv

def test_unknown_commitment_level(user, specs):
    chain = OddStatusLedger()
    ledger = LedgerClient(EmulatorTransport(chain), user, timeout=0, poll_interval=0)

    with pytest.raises(TransactionTimeout) as ee:
        ledger.create_asset(specs[1], 'memory://nft')
    assert ee.value.asset.address in chain.assets

def test_bad_signature(chain, user, specs):
    class Impostor:
        # claims user's address, signs with another key
        def __init__(self):
            self.address = user.address
            self.sign = Keypair.generate().sign

    ledger = LedgerClient(EmulatorTransport(chain), Impostor(), poll_interval=0)
    with pytest.raises(TransactionRejected) as ee:
        ledger.create_asset(specs[1], 'memory://nft')
    assert ee.value.code == RPC_BAD_SIGNATURE
    assert not chain.assets

def test_unknown_method(ledger):
    with pytest.raises(LedgerError) as ee:
        ledger.send('burnEverything')
    assert ee.value.code == RPC_METHOD_NOT_FOUND
    assert type(ee.value) is LedgerError

def test_missing_params(ledger):
    with pytest.raises(TransactionRejected) as ee:
        ledger.send('createNft', name='x')
    assert ee.value.code == RPC_INVALID_PARAMS
    assert 'symbol' in str(ee.value)

class ScriptedTransport(LedgerTransportABC):
    # plays back canned responses
    name = 'scripted'

    def __init__(self, answers):
        super().__init__()
        self.answers = list(answers)
        self.sent = []

    def _send_recv(self, msg, signer, signature):
        self.sent.append(msg)
        return self.answers.pop(0)

def test_failed_transaction(user, specs):
    asset = dict(address='A', mint='M', name='My NFT', symbol='SYMBOL', uri='u',
                    sellerFeeBasisPoints=0, updateAuthority=user.address)
    tr = ScriptedTransport([
        dict(result=dict(signature='SIG', asset=asset)),
        dict(result=dict(context=dict(slot=5),
                value=[dict(slot=5, confirmationStatus='processed', err=dict(InstructionError=[0, 1]))])),
    ])
    ledger = LedgerClient(tr, user, poll_interval=0)

    with pytest.raises(TransactionRejected):
        ledger.create_asset(specs[1], 'u')

    assert [m['method'] for m in tr.sent] == [ 'createNft', 'getSignatureStatuses' ]
    assert tr.sent[1]['params'] == dict(signatures=['SIG'])

def test_garbage_response(user):
    ledger = LedgerClient(ScriptedTransport([ dict(hello=1) ]), user)
    with pytest.raises(LedgerUnavailable):
        ledger.find_asset_by_address('A')

# EOF
