#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# HTTP session shared by the storage uploader and the ledger transport.
#
# - Requires 'requests' module
# - HTTP_PROXY / HTTPS_PROXY in environment are honoured by requests itself, see
#   <https://2.python-requests.org/en/master/user/advanced/#proxies>
#
import requests

class NetConnection:

    def __init__(self, server, timeout=60, headers=None):
        from . import __version__
        self.ses = requests.Session()
        self.server = server.rstrip('/')
        self.timeout = timeout
        self.ses.headers['user-agent'] = f'nftpub/{__version__}'
        if headers:
            self.ses.headers.update(headers)

    def url(self, path):
        assert path[0] == '/'
        return self.server + path

    def post(self, path, **kws):
        # raw response; caller checks status
        kws.setdefault('timeout', self.timeout)
        return self.ses.post(self.url(path), **kws)

def decode_json(r):
    try:
        return r.json()
    except ValueError:
        raise ValueError("Bad json: " + r.text)

# EOF
