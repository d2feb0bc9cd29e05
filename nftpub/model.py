#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Data types passed between storage, ledger and the workflow. All immutable.
#
from collections import namedtuple
from .utils import check_royalty

class AssetSpec(namedtuple('AssetSpec', 'name symbol description royalty_bps image_file')):
    # What one collectible should look like; image_file is a local path.
    __slots__ = ()
    is_collection = False

    def __new__(cls, name, symbol, description, royalty_bps, image_file):
        check_royalty(royalty_bps)
        return super().__new__(cls, name, symbol, description, royalty_bps, image_file)

class CollectionAssetSpec(namedtuple('CollectionAssetSpec',
                            'name symbol description royalty_bps image_file authority')):
    # Same fields, plus the keypair that will attest membership later.
    # - not a subclass of AssetSpec on purpose; do not mix them up
    __slots__ = ()
    is_collection = True

    def __new__(cls, name, symbol, description, royalty_bps, image_file, authority):
        check_royalty(royalty_bps)
        assert authority is not None, 'collection needs an authority'
        return super().__new__(cls, name, symbol, description, royalty_bps,
                                    image_file, authority)

# As reported by the ledger. Address and mint never change after creation.
OnChainAsset = namedtuple('OnChainAsset', 'address mint name symbol uri royalty_bps '
                                'is_collection update_authority collection verified')

TransactionReceipt = namedtuple('TransactionReceipt', 'signature slot commitment')

# Everything one publication run needs to know about the assets.
PublicationConfig = namedtuple('PublicationConfig', 'collection asset update')

def asset_from_json(d):
    # ledger responses use the wire names
    return OnChainAsset(address=d['address'], mint=d['mint'],
                        name=d['name'], symbol=d['symbol'], uri=d['uri'],
                        royalty_bps=d['sellerFeeBasisPoints'],
                        is_collection=bool(d.get('isCollection', False)),
                        update_authority=d['updateAuthority'],
                        collection=d.get('collection'),
                        verified=bool(d.get('verified', False)))

# EOF
