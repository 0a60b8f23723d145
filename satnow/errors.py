class SatnowError(Exception):
    pass


class ConfigurationError(SatnowError):
    """bad coordinates, empty store path and friends"""


class StoreError(SatnowError):
    pass


class SourceError(SatnowError):
    """a source-list location could not be read as a file or fetched"""


class FetchError(SourceError):
    pass


class PropagationError(SatnowError):
    """the propagation service could not produce a position for a record"""
