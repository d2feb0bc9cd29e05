#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
import os, pytest

from nftpub.identity import Keypair
from nftpub.emulator import LedgerState
from nftpub.transport import EmulatorTransport
from nftpub.ledger import LedgerClient
from nftpub.storage import MemoryStorage
from nftpub.model import AssetSpec, CollectionAssetSpec, PublicationConfig

@pytest.fixture(scope='session')
def user():
    # the signing identity for most tests
    return Keypair.generate()

@pytest.fixture
def chain():
    # fresh emulated ledger per test
    return LedgerState()

@pytest.fixture
def ledger(chain, user):
    return LedgerClient(EmulatorTransport(chain), user, poll_interval=0)

@pytest.fixture
def storage():
    return MemoryStorage()

@pytest.fixture
def images(tmp_path):
    # three different images; contents must differ or URIs would collide
    rv = {}
    for fn in [ 'collection.png', 'solana.png', 'success.png' ]:
        p = tmp_path / fn
        p.write_bytes(b'\x89PNG\r\n\x1a\n' + fn.encode('ascii') + os.urandom(16))
        rv[fn] = str(p)
    return rv

@pytest.fixture
def make_config(images, user):
    # config like the original hard-coded values, authority can be changed
    def doit(authority=None):
        coll = CollectionAssetSpec(name='TestCollectionNFT', symbol='TEST',
                        description='Test Description Collection', royalty_bps=100,
                        image_file=images['collection.png'], authority=authority or user)
        asset = AssetSpec(name='My NFT', symbol='SYMBOL', description='This is my NFT',
                        royalty_bps=0, image_file=images['solana.png'])
        update = AssetSpec(name='UPDATE', symbol='SYMBOL',
                        description='This is the description of my updated NFT',
                        royalty_bps=100, image_file=images['success.png'])
        return PublicationConfig(collection=coll, asset=asset, update=update)

    return doit

@pytest.fixture
def config(make_config):
    return make_config()

@pytest.fixture
def reports():
    # collects what the workflow reports
    return []

# EOF
