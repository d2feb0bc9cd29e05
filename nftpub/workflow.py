#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# workflow.py
#
# Publish a collection, an NFT inside it, then new metadata for that NFT.
#
# Steps, in this order, each needing what the previous one produced:
#
#   upload_collection   image + metadata for the collection => URI
#   create_collection   mint collection NFT => collection address
#   upload_asset        image + metadata for the NFT => URI
#   create_asset        mint NFT pointing at the collection (unverified)
#   verify_membership   collection authority attests the NFT is a member
#   upload_update       revised image + metadata => new URI
#   update_uri          point the NFT at the new URI
#
# Any failure stops the run where it is. Nothing is rolled back: whatever was
# created on-chain stays there. Use retry() (or a journal + resume) to carry
# on from the failed step; never start over, that would mint duplicates.
#
import os, threading
from collections import namedtuple
from .exceptions import (PublishError, TransactionRejected, TransactionTimeout,
                            VerificationRejected, WorkflowFailed)
from .utils import make_metadata, explorer_url, render_royalty
from .constants import DEFAULT_CLUSTER

UPLOAD_COLLECTION = 'upload_collection'
CREATE_COLLECTION = 'create_collection'
UPLOAD_ASSET = 'upload_asset'
CREATE_ASSET = 'create_asset'
VERIFY_MEMBERSHIP = 'verify_membership'
UPLOAD_UPDATE = 'upload_update'
UPDATE_URI = 'update_uri'

STEPS = [ UPLOAD_COLLECTION, CREATE_COLLECTION, UPLOAD_ASSET, CREATE_ASSET,
            VERIFY_MEMBERSHIP, UPLOAD_UPDATE, UPDATE_URI ]

COMPLETED = 'completed'

# outcome of one advance()
StepResult = namedtuple('StepResult', 'step ok value error')

# outcome of a whole run
PublicationResult = namedtuple('PublicationResult',
                        'collection asset verify_receipt update_uri update_receipt')

class Publication:
    #
    # One run of the workflow. Not reusable: make a new one per run.
    #
    def __init__(self, config, storage, ledger, report=print, journal=None,
                        cluster=DEFAULT_CLUSTER):
        self.config = config
        self.storage = storage
        self.ledger = ledger
        self.report = report or (lambda msg: None)
        self.journal = journal
        self.cluster = cluster

        self.step = STEPS[0]
        self.failure = None         # (step, exception) when stopped
        self.values = {}            # everything produced so far, by name

        self._busy = threading.Lock()

    def __repr__(self):
        st = 'failed at ' + self.failure[0] if self.failure else self.step
        return '<%s %s: %s>' % (self.__class__.__name__, self.config.asset.name, st)

    @property
    def is_done(self):
        return self.step == COMPLETED

    @property
    def is_failed(self):
        return self.failure is not None

    def advance(self):
        # Do exactly one step. Never raises for the expected errors, instead
        # gives back a StepResult with ok=False and remembers the failure.
        if self.is_done:
            raise RuntimeError("Already completed")
        if self.is_failed:
            raise RuntimeError(f"Stopped at {self.failure[0]}; use retry()")

        if not self._busy.acquire(blocking=False):
            raise RuntimeError("Another step of this run is in progress")

        try:
            step = self.step
            handler = getattr(self, 'do_' + step)
            try:
                value = handler()
            except (PublishError, OSError) as exc:
                self.failure = (step, exc)
                self._save()
                return StepResult(step, False, None, exc)

            idx = STEPS.index(step)
            self.step = STEPS[idx+1] if idx+1 < len(STEPS) else COMPLETED
            self._save()

            return StepResult(step, True, value, None)
        finally:
            self._busy.release()

    def run(self):
        # Go until completed, raise WorkflowFailed on the first problem
        while not self.is_done:
            rv = self.advance()
            if not rv.ok:
                raise WorkflowFailed(rv.step, rv.error)

        return self.result()

    def retry(self):
        # Run again, starting at the step that failed
        if not self.is_failed:
            raise RuntimeError("Nothing to retry")
        self.failure = None
        return self.run()

    def result(self):
        assert self.is_done
        v = self.values
        return PublicationResult(v['collection'], v['asset'], v['verify_receipt'],
                                        v['update_uri'], v['update_receipt'])

    def _save(self):
        if self.journal:
            self.journal.save(self)

    def _need(self, key):
        # value from an earlier step; missing means the steps got out of order
        rv = self.values.get(key)
        if not rv:
            raise RuntimeError(f"Step {self.step} needs {key}, which is missing")
        return rv

    def _upload(self, spec):
        # image first, then the document that embeds that same image URI
        with open(spec.image_file, 'rb') as fd:
            data = fd.read()

        image_uri = self.storage.upload_bytes(data, os.path.basename(spec.image_file))
        self.report(f"Image uri: {image_uri}")

        uri = self.storage.upload_metadata(make_metadata(spec, image_uri))
        self.report(f"Metadata uri: {uri}")

        return image_uri, uri

    def _create(self, key, spec, uri, collection=None):
        # Mint, unless an earlier try already submitted it: then only wait.
        # - pending mint is kept as <key>_pending + <key>_signature
        pending = self.values.get(key + '_pending')
        if pending:
            try:
                self.ledger.wait_for_commitment(self.values[key + '_signature'])
            except TransactionRejected:
                # never landed, so next try mints again
                self.values.pop(key + '_pending')
                self.values.pop(key + '_signature')
                raise
            obj = self.ledger.find_asset_by_address(pending.address)
        else:
            try:
                obj = self.ledger.create_asset(spec, uri, collection=collection)
            except TransactionTimeout as exc:
                if exc.asset:
                    self.values[key + '_pending'] = exc.asset
                    self.values[key + '_signature'] = exc.signature
                raise

        self.values.pop(key + '_pending', None)
        self.values.pop(key + '_signature', None)
        self.values[key] = obj

        return obj

    def _link(self, kind, value):
        return explorer_url(kind, value, self.cluster)

    #
    # Steps. Each may raise; advance() catches.
    #
    def do_upload_collection(self):
        img, uri = self._upload(self.config.collection)
        self.values.update(collection_image_uri=img, collection_uri=uri)
        return uri

    def do_create_collection(self):
        coll = self._create('collection', self.config.collection, self._need('collection_uri'))

        self.report(f"Collection mint: {self._link('address', coll.address)}")
        return coll

    def do_upload_asset(self):
        img, uri = self._upload(self.config.asset)
        self.values.update(asset_image_uri=img, asset_uri=uri)
        return uri

    def do_create_asset(self):
        coll = self._need('collection')

        spec = self.config.asset
        nft = self._create('asset', spec, self._need('asset_uri'), collection=coll.address)

        self.report(f"Minted token: {self._link('address', nft.address)}"
                        f" (royalty {render_royalty(spec.royalty_bps)})")
        return nft

    def do_verify_membership(self):
        coll = self._need('collection')
        nft = self._need('asset')

        authority = self.config.collection.authority
        if authority.address != self.ledger.identity.address:
            raise VerificationRejected(f"Signer {self.ledger.identity.address} is not "
                                        f"the collection authority {authority.address}")

        rcpt = self.ledger.verify_collection_membership(nft.address, coll.address)
        self.values['verify_receipt'] = rcpt

        self.report(f"Verified in collection: {self._link('tx', rcpt.signature)}")
        return rcpt

    def do_upload_update(self):
        img, uri = self._upload(self.config.update)
        self.values.update(update_image_uri=img, update_uri=uri)
        return uri

    def do_update_uri(self):
        known = self._need('asset')
        nft = self.ledger.find_asset_by_address(known.address)

        rcpt = self.ledger.update_metadata_uri(nft, self._need('update_uri'))
        self.values['update_receipt'] = rcpt

        self.report(f"Token mint: {self._link('address', nft.address)}")
        self.report(f"Transaction: {self._link('tx', rcpt.signature)}")
        return rcpt

def publish(config, storage, ledger, **kws):
    # Simple case: one call, returns PublicationResult or raises WorkflowFailed
    return Publication(config, storage, ledger, **kws).run()

# EOF
