#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Wrappers for the crypto library. AKA API Cleanup
#
# My standards:
# - private key: 32 byte ed25519 seed
# - pubkeys: 32 bytes, raw
# - signature: 64 bytes
# - no DER, no PEM, no other serializations
# - verify returns bool, doesn't raise exception
#
import os
from hashlib import sha256
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

__all__ = [ 'sha256s', 'CT_pick_keypair', 'CT_priv_to_pubkey', 'CT_sign', 'CT_sig_verify' ]

def sha256s(msg):
    # single-shot SHA256
    return sha256(msg).digest()

def CT_priv_to_pubkey(pk):
    assert len(pk) == 32
    pub = Ed25519PrivateKey.from_private_bytes(pk).public_key()
    return pub.public_bytes(Encoding.Raw, PublicFormat.Raw)

def CT_pick_keypair():
    # return (priv, pub)
    priv = os.urandom(32)
    return priv, CT_priv_to_pubkey(priv)

def CT_sign(privkey, msg):
    # returns 64-byte sig; ed25519 hashes internally so msg can be any length
    return Ed25519PrivateKey.from_private_bytes(privkey).sign(msg)

def CT_sig_verify(pub, msg, sig):
    # returns True or False
    if len(pub) != 32 or len(sig) != 64:
        return False
    try:
        Ed25519PublicKey.from_public_bytes(pub).verify(sig, msg)
    except InvalidSignature:
        return False
    return True

# EOF
