"""Exceptions raised by the sighting and discovery services."""


class WhatsInError(Exception):
    """Base class for service errors."""


class InvalidInputError(WhatsInError):
    """Input is missing, malformed or out of range."""


class NoGpsDataError(WhatsInError):
    """A readable image carries no GPS coordinates."""


class ImageParseError(WhatsInError):
    """Uploaded bytes are not a decodable image."""


class IntegrityFaultError(WhatsInError):
    """A post references a product or place that does not exist."""
