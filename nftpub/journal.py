#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Run journal: where a publication got to, so another process can resume it.
#
# File contents:
# CBOR sequence of 2 items:
#   (JOURNAL_VERSION, body_cbor)
# - body_cbor is serialized CBOR, a mapping with
#     - fingerprint: sha256 over the config (specs + authority address)
#     - step: next step to run (or 'completed')
#     - values: URIs, assets and receipts produced so far, plus any mint
#       that was submitted but not yet final (<key>_pending, <key>_signature)
#     - failure: [step, error class name, message] or None
#     - updated_at: datetime in UTC
#
import os, datetime, cbor2
from .constants import JOURNAL_VERSION
from .compat import sha256s
from .model import OnChainAsset, TransactionReceipt
from .utils import B2A, canonical_json
from .workflow import Publication, STEPS, COMPLETED

# which values need rebuilding into our types
ASSET_KEYS = { 'collection', 'asset', 'collection_pending', 'asset_pending' }
RECEIPT_KEYS = { 'verify_receipt', 'update_receipt' }

def config_fingerprint(config):
    # changes if anything about what we are publishing changes
    d = dict()
    for fn in config._fields:
        spec = getattr(config, fn)
        sd = spec._asdict()
        if 'authority' in sd:
            sd['authority'] = sd['authority'].address
        d[fn] = sd

    return B2A(sha256s(canonical_json(d)))

class Journal:

    def __init__(self, fname):
        self.fname = fname

    def __repr__(self):
        return '<%s %s>' % (self.__class__.__name__, self.fname)

    def exists(self):
        return os.path.exists(self.fname)

    def save(self, pub):
        values = {}
        for k, v in pub.values.items():
            values[k] = v._asdict() if hasattr(v, '_asdict') else v

        failure = None
        if pub.failure:
            step, exc = pub.failure
            failure = [step, exc.__class__.__name__, str(exc)]

        body = dict(fingerprint=config_fingerprint(pub.config),
                    step=pub.step,
                    values=values,
                    failure=failure,
                    updated_at=datetime.datetime.now(datetime.timezone.utc))

        complete = cbor2.dumps( (JOURNAL_VERSION, cbor2.dumps(body)) )

        # write and rename, so a crash never leaves half a file
        tmp = self.fname + '.tmp'
        with open(tmp, 'wb') as fd:
            fd.write(complete)
        os.replace(tmp, self.fname)

    def read(self):
        # give back body dict, values rebuilt
        with open(self.fname, 'rb') as fd:
            seq = cbor2.loads(fd.read())

        if not isinstance(seq, list) or len(seq) != 2 or seq[0] != JOURNAL_VERSION:
            raise ValueError(f"Not a journal file (or wrong version): {self.fname}")

        body = cbor2.loads(seq[1])

        if body['step'] not in STEPS and body['step'] != COMPLETED:
            raise ValueError(f"Unknown step in journal: {body['step']}")

        values = body['values']
        for k in ASSET_KEYS & set(values):
            values[k] = OnChainAsset(**values[k])
        for k in RECEIPT_KEYS & set(values):
            values[k] = TransactionReceipt(**values[k])

        return body

    def load(self, config, storage, ledger, **kws):
        # Make a Publication that carries on from where the journal says.
        # - previous failure is forgotten; the failed step will run again
        body = self.read()

        if body['fingerprint'] != config_fingerprint(config):
            raise ValueError("Journal was written for a different config")

        pub = Publication(config, storage, ledger, journal=self, **kws)
        pub.step = body['step']
        pub.values.update(body['values'])

        return pub

# EOF
