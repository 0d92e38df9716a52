"""Domain-specific exceptions."""


class GalleryError(Exception):
    pass


class NetworkError(GalleryError):
    """Transport failure or non-2xx response from the image source."""


class FetchTimeout(NetworkError):
    """A page fetch did not resolve in time; retryable like any network error."""


class StaleResponse(GalleryError):
    """A reply arrived after its request context was superseded."""


class RenderError(GalleryError):
    pass
