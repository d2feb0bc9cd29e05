#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Off-chain storage for images and metadata documents. Each upload gives back
# a content URI. Callers must not assume the same bytes give the same URI.
#
import json
import requests
from .constants import *
from .exceptions import StorageUnavailable, PayloadTooLarge
from .compat import sha256s
from .net import NetConnection, decode_json
from .utils import B2A, guess_content_type

class StorageABC:
    #
    # Abstract base class. Subclasses implement _put().
    #
    max_size = MAX_UPLOAD_SIZE

    def _put(self, data, name, content_type):
        # store bytes, return URI
        raise NotImplementedError

    def _check_size(self, data):
        if len(data) > self.max_size:
            raise PayloadTooLarge(f"{len(data):,} bytes is over the {self.max_size:,} byte limit")

    def upload_bytes(self, data, name):
        data = bytes(data)
        self._check_size(data)
        return self._put(data, name, guess_content_type(name))

    def upload_metadata(self, doc):
        # JSON document => URI
        body = json.dumps(doc, indent=2).encode('utf-8')
        self._check_size(body)
        return self._put(body, 'metadata.json', 'application/json')

class HTTPStorage(StorageABC):
    #
    # NFT.Storage style service: POST /upload, answer has the CID.
    #
    def __init__(self, api_key, server=DEFAULT_STORAGE_URL, gateway=DEFAULT_GATEWAY,
                        max_size=MAX_UPLOAD_SIZE, timeout=60):
        self.web = NetConnection(server, timeout=timeout,
                                    headers={'Authorization': f'Bearer {api_key}'})
        self.gateway = gateway.rstrip('/')
        self.max_size = max_size

    def _put(self, data, name, content_type):
        try:
            if content_type == 'application/json':
                r = self.web.post('/upload', data=data,
                                    headers={'Content-Type': content_type})
            else:
                r = self.web.post('/upload', files={'file': (name, data, content_type)})
        except requests.RequestException as exc:
            raise StorageUnavailable(f"Upload of {name} failed: {exc}")

        if r.status_code == 413:
            raise PayloadTooLarge(f"Server refused {name}: too large")
        if r.status_code != 200:
            raise StorageUnavailable(f"Upload failed ({r.status_code}): {r.text}")

        try:
            ans = decode_json(r)
        except ValueError as exc:
            raise StorageUnavailable(str(exc))

        if not ans.get('ok'):
            msg = (ans.get('error') or {}).get('message', 'Unknown error')
            raise StorageUnavailable(f"Upload failed: {msg}")

        return f"{self.gateway}/ipfs/{ans['value']['cid']}"

class MemoryStorage(StorageABC):
    #
    # Keeps everything in a dict. For testing and dry runs.
    #
    def __init__(self, max_size=MAX_UPLOAD_SIZE):
        self.max_size = max_size
        self.blobs = {}
        self.uploads = []           # (uri, name) in order

    def _put(self, data, name, content_type):
        uri = 'memory://' + B2A(sha256s(data))
        self.blobs[uri] = data
        self.uploads.append((uri, name))
        return uri

    def get(self, uri):
        try:
            return self.blobs[uri]
        except KeyError:
            raise StorageUnavailable(f"No such content: {uri}")

    def get_json(self, uri):
        return json.loads(self.get(uri))

# EOF
