#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Signing identity: an ed25519 keypair and the address it implies.
#
# Creating and storing keys is not our business; we only load an existing
# keypair file (same format as `solana-keygen`: JSON list of 64 numbers).
#
import json
from .compat import CT_pick_keypair, CT_priv_to_pubkey, CT_sign
from .utils import b58

class Keypair:

    def __init__(self, secret):
        # secret is the 32-byte seed
        assert len(secret) == 32, 'expecting 32 byte seed'
        self._secret = bytes(secret)
        self.pubkey = CT_priv_to_pubkey(self._secret)
        self.address = b58(self.pubkey)

    def __repr__(self):
        return '<%s %s>' % (self.__class__.__name__, self.address)

    def __eq__(self, other):
        return isinstance(other, Keypair) and other.pubkey == self.pubkey

    @classmethod
    def generate(cls):
        priv, _ = CT_pick_keypair()
        return cls(priv)

    @classmethod
    def from_bytes(cls, raw):
        # 64 bytes: seed + pubkey, check they agree
        raw = bytes(raw)
        if len(raw) != 64:
            raise ValueError("Keypair must be 64 bytes")
        rv = cls(raw[0:32])
        if rv.pubkey != raw[32:]:
            raise ValueError("Keypair pubkey does not match secret")
        return rv

    @classmethod
    def from_json_file(cls, fname):
        with open(fname, 'rt') as fd:
            nums = json.load(fd)
        if not isinstance(nums, list) or not all(isinstance(n, int) for n in nums):
            raise ValueError(f"Not a keypair file: {fname}")
        return cls.from_bytes(bytes(nums))

    def sign(self, msg):
        # 64-byte ed25519 signature over msg
        return CT_sign(self._secret, msg)

# EOF
