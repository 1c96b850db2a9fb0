class LendingAPIError(Exception): pass

class DatabaseInsertError(LendingAPIError): pass

class TransientStorageConflict(LendingAPIError):
    """Storage refused a write because another request holds the lock."""
