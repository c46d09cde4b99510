class SearchProviderError(Exception):
    """Base class for all errors raised by the search provider."""


class ProjectIndexError(SearchProviderError):
    """Reading the recent projects of an application failed."""


class LaunchError(SearchProviderError):
    """An application could not be resolved or spawned."""


class ResultNotFound(SearchProviderError):
    """A result id is not part of the current project index."""


class ServiceStartupError(SearchProviderError):
    """The service could not take over its D-Bus responsibilities."""
