"""Exceptions raised at the pipeline's collaborator boundaries."""


class ConfigurationError(ValueError):
    """A precondition for querying a source is missing (credential, provider)."""


class ExtractionError(Exception):
    """The extraction backend failed or returned nothing usable."""


class ExtractionParseError(ExtractionError):
    """Extractor output could not be parsed into event candidates."""


class InvalidTransitionError(RuntimeError):
    """A source status was asked to move backwards or skip a state."""
