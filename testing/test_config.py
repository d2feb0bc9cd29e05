#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
import os, json, pytest
from nftpub.config import load_config, parse_config
from nftpub.model import AssetSpec, CollectionAssetSpec

GOOD = {
    "collection": { "name": "TestCollectionNFT", "symbol": "TEST",
                    "description": "Test Description Collection",
                    "royalty_bps": 100, "image_file": "success.png" },
    "asset": { "name": "My NFT", "symbol": "SYMBOL", "description": "This is my NFT",
                    "royalty_bps": 0, "image_file": "solana.png" },
    "update": { "name": "UPDATE", "symbol": "SYMBOL",
                    "description": "This is the description of my updated NFT",
                    "royalty_bps": 100, "image_file": "success.png" },
}

def test_load(tmp_path, user):
    fn = tmp_path / 'publish.json'
    fn.write_text(json.dumps(GOOD))

    cfg = load_config(str(fn), user)
    assert isinstance(cfg.collection, CollectionAssetSpec)
    assert isinstance(cfg.asset, AssetSpec)
    assert cfg.collection.authority is user
    assert cfg.asset.name == 'My NFT'
    assert cfg.update.royalty_bps == 100

    # relative to config file
    assert cfg.asset.image_file == os.path.join(str(tmp_path), 'solana.png')

@pytest.mark.parametrize('section, change, why', [
    ('asset', dict(royalty_bps=10001), 'out of range'),
    ('asset', dict(colour='red'), 'unknown fields'),
    ('update', dict(name=None), None),
])
def test_bad(user, section, change, why):
    d = json.loads(json.dumps(GOOD))
    d[section].update(change)
    if change.get('name', 1) is None:
        del d[section]['name']

    with pytest.raises(ValueError) as ee:
        parse_config(d, user)
    assert section in str(ee.value) or why in str(ee.value)

def test_missing_section(user):
    d = dict(GOOD)
    del d['update']
    with pytest.raises(ValueError) as ee:
        parse_config(d, user)
    assert 'update' in str(ee.value)

    with pytest.raises(ValueError):
        parse_config([1, 2], user)

# EOF
