class KanjiSrsError(Exception):
    """Base class for every error raised by kanji_srs."""

    retryable = False


class StorageError(KanjiSrsError):
    """The review store could not complete a read or write.

    Raised with the backend exception chained as ``__cause__``. A failed
    ``apply`` never leaves a partially written record behind, so callers
    may simply retry.
    """

    retryable = True

    def __init__(self, message, item_id=None):
        super().__init__(message)
        self.item_id = item_id


class StorageUnavailable(StorageError):
    pass


class StorageTimeout(StorageError):
    pass


class CatalogError(KanjiSrsError):
    pass


class CatalogEmpty(CatalogError):
    pass


class CatalogInvalid(CatalogError):
    def __init__(self, message, index=None, errors=None):
        super().__init__(message)
        self.index = index
        self.errors = errors or {}
