"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class DataUnavailableError(DomainException):
    """A snapshot source collection could not be fetched"""

    pass


class RemoteGenerationFailed(DomainException):
    """Remote generation service errored, timed out or is not provisioned"""

    pass


class MalformedRemoteResponse(RemoteGenerationFailed):
    """Remote generation payload does not match the expected artifact shape"""

    pass


class PersistenceUnavailable(DomainException):
    """Artifact store is missing or rejected the write"""

    pass
