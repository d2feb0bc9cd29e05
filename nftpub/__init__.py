#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#

__version__ = '0.1.0'

__all__ = [ 'workflow', 'ledger', 'storage', 'transport', 'emulator', 'journal',
            'config', 'identity', 'model', 'exceptions', 'constants', 'utils' ]

# EOF
