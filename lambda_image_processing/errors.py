class ImageProcessingError(Exception):
    """Base class for every failure raised while processing a request."""


class RequestDecodeError(ImageProcessingError):
    pass


class BadEncodingError(RequestDecodeError):
    pass


class BadFormatError(RequestDecodeError):
    pass


class FetchError(ImageProcessingError):
    pass


class BadStatusError(FetchError):
    pass


class UnknownLengthError(FetchError):
    pass


class TooLargeError(FetchError):
    pass


class UnsupportedImageError(FetchError):
    pass


class InvalidInputError(ImageProcessingError):
    pass


class PublishError(ImageProcessingError):
    pass


class EncodeError(PublishError):
    pass


class WriteError(PublishError):
    pass
