#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
# Exceptions
#

class PublishError(RuntimeError):
    pass

class StorageUnavailable(PublishError):
    pass

class PayloadTooLarge(PublishError):
    pass

class LedgerError(PublishError):
    def __init__(self, msg, code=None, raw_msg=None):
        self.code = code
        self.raw_msg = raw_msg or msg
        super().__init__(msg)

class LedgerUnavailable(LedgerError):
    pass

class TransactionRejected(LedgerError):
    pass

class TransactionTimeout(LedgerError):
    # set when a create was submitted but did not reach commitment in time
    signature = None
    asset = None

class VerificationRejected(LedgerError):
    pass

class AssetNotFound(LedgerError):
    pass

class WorkflowFailed(PublishError):
    # terminal state of a run: which step, and the original error
    def __init__(self, step, cause):
        self.step = step
        self.cause = cause
        super().__init__(f'{step}: {cause.__class__.__name__}: {cause}')

# EOF
