#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# System constants.
#

# Royalty is in basis points: 10000 = 100%
MAX_BASIS_POINTS = 10000

# token-metadata program limits on the on-chain record
MAX_NAME_LENGTH = 32
MAX_SYMBOL_LENGTH = 10
MAX_URI_LENGTH = 200

# commitment levels, weakest first
COMMITMENT_LEVELS = [ 'processed', 'confirmed', 'finalized' ]

# never act on a transaction that could still be rolled back
DEFAULT_COMMITMENT = 'finalized'

# seconds to wait for the commitment level, and polling rate
FINALITY_TIMEOUT = 60
POLL_INTERVAL = 0.5

# cluster name used in explorer links
DEFAULT_CLUSTER = 'devnet'
EXPLORER_URL = 'https://explorer.solana.com'

# NFT.Storage style upload service, and where the CID can be fetched back
DEFAULT_STORAGE_URL = 'https://api.nft.storage'
DEFAULT_GATEWAY = 'https://ipfs.io'

# largest single upload we will attempt
MAX_UPLOAD_SIZE = 100*1024*1024

# JSON-RPC error codes, as returned by the ledger gateway (and emulator)
RPC_INVALID_PARAMS = -32602
RPC_METHOD_NOT_FOUND = -32601
RPC_TX_REJECTED = -32002
RPC_NOT_FOUND = -32020
RPC_NOT_AUTHORITY = -32021
RPC_BAD_SIGNATURE = -32022

# tag at start of run journal files
JOURNAL_VERSION = 'NFTPUB_RUN_v1'

# EOF
