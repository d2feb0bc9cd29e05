#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
import os, json, base58, mimetypes
from binascii import b2a_hex
from .constants import *

# show bytes as hex in a string
B2A = lambda x: b2a_hex(x).decode('ascii')

def b58(raw):
    # bytes => base58 text, as used for all addresses and signatures
    return base58.b58encode(raw).decode('ascii')

def unb58(txt, expect_len=None):
    try:
        rv = base58.b58decode(txt)
    except ValueError:
        raise ValueError(f"Not base58: {txt!r}")
    if expect_len is not None and len(rv) != expect_len:
        raise ValueError(f"Expected {expect_len} bytes, got {len(rv)}: {txt}")
    return rv

def is_address(txt):
    # looks like a 32-byte base58 public key?
    try:
        unb58(txt, 32)
        return True
    except (ValueError, TypeError):
        return False

def canonical_json(obj):
    # stable bytes for signing: sorted keys, no whitespace
    return json.dumps(obj, sort_keys=True, separators=(',', ':')).encode('utf-8')

def explorer_url(kind, value, cluster=DEFAULT_CLUSTER):
    # link to public block explorer, kind is 'address' or 'tx'
    assert kind in { 'address', 'tx' }
    rv = f'{EXPLORER_URL}/{kind}/{value}'
    if cluster and cluster != 'mainnet-beta':
        rv += f'?cluster={cluster}'
    return rv

def guess_content_type(fname):
    ct, _ = mimetypes.guess_type(fname)
    return ct or 'application/octet-stream'

def render_royalty(bps):
    # 250 => '2.50%'
    return '%d.%02d%%' % divmod(bps, 100)

def check_royalty(bps):
    if isinstance(bps, bool) or not isinstance(bps, int):
        raise ValueError(f"Royalty must be integer basis points: {bps!r}")
    if not (0 <= bps <= MAX_BASIS_POINTS):
        raise ValueError(f"Royalty out of range (0..{MAX_BASIS_POINTS}): {bps}")
    return bps

def make_metadata(spec, image_uri):
    # Off-chain JSON document for one asset. The image URI must already exist,
    # and must be the one uploaded for this same spec.
    assert image_uri, 'need image uri first'
    fname = os.path.basename(spec.image_file)

    return dict(name=spec.name,
                symbol=spec.symbol,
                description=spec.description,
                image=image_uri,
                seller_fee_basis_points=spec.royalty_bps,
                properties=dict(files=[dict(uri=image_uri, type=guess_content_type(fname))],
                                category='image'))

# EOF
