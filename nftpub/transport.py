#
# (c) Copyright 2021 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# transport.py
#
# Move signed JSON-RPC requests to a ledger gateway, or to the emulator.
#
import json, itertools
from pprint import pformat
import requests
from .exceptions import LedgerUnavailable, TransactionTimeout
from .net import NetConnection, decode_json

# Change this to see traffic details
VERBOSE = False

class LedgerTransportABC:
    #
    # Abstract base class. Low level details about talking JSON-RPC.
    #
    name = 'abstract'

    def __init__(self):
        self._ids = itertools.count(1)

    def _send_recv(self, msg, signer, signature):
        # take request dict, round-trip it, return response dict
        raise NotImplementedError

    def close(self):
        # release resources
        pass

    def send(self, method, params, signer, signature):
        # Wrap into JSON-RPC request, send it, give back the response envelope
        # - response has either 'result' or 'error' (dict w/ code + message)
        msg = dict(jsonrpc='2.0', id=next(self._ids), method=method, params=params)

        if VERBOSE:
            print(f">> {method} (%s)" % ', '.join(k+'='+(str(v) if len(str(v)) < 45 else '...')
                                            for k,v in params.items()))

        resp = self._send_recv(msg, signer, signature)

        if not isinstance(resp, dict) or ('result' not in resp and 'error' not in resp):
            raise LedgerUnavailable('Bad JSON-RPC response from ledger')

        if VERBOSE:
            print("<< " + pformat(resp.get('error') or resp['result']))

        return resp

class HTTPLedgerTransport(LedgerTransportABC):
    #
    # Real network: POST to the gateway's JSON-RPC endpoint.
    #
    def __init__(self, url, timeout=60):
        super().__init__()
        self.web = NetConnection(url, timeout=timeout)
        self.name = self.web.server

    def close(self):
        self.web.ses.close()

    def _send_recv(self, msg, signer, signature):
        hdrs = {'x-signer': signer, 'x-signature': signature}
        try:
            r = self.web.post('/', json=msg, headers=hdrs)
        except requests.Timeout as exc:
            raise TransactionTimeout(f"No answer from ledger for {msg['method']}: {exc}")
        except requests.RequestException as exc:
            raise LedgerUnavailable(f"Cannot reach ledger: {exc}")

        if r.status_code >= 500 and not r.content:
            raise LedgerUnavailable(f"Ledger server error: {r.status_code}")

        try:
            return decode_json(r)
        except ValueError as exc:
            raise LedgerUnavailable(str(exc))

class EmulatorTransport(LedgerTransportABC):
    #
    # In-process emulated ledger. Everything goes through JSON on the way,
    # so only wire types make it across.
    #
    name = 'emulator'

    def __init__(self, ledger):
        super().__init__()
        self.ledger = ledger

    def _send_recv(self, msg, signer, signature):
        msg = json.loads(json.dumps(msg))
        resp = self.ledger.handle(msg, signer, signature)
        return json.loads(json.dumps(resp))

# EOF
