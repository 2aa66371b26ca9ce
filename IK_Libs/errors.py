"""
Exception hierarchy for ImageKit.

Engines raise these errors and the image session lets them propagate
without replacing its current buffer, so a caught error always leaves the
previously loaded image intact.

Classes:
    ImageKitError: Base class for every toolkit error
    NotLoadedError: An operation needs an image but none is loaded
    UnsupportedFormatError: Format cannot be decoded or encoded
    DecodeFailedError: The codec rejected the source data
    EncodeFailedError: The codec could not write the image
    InvalidColorError: A color value could not be parsed
    InvalidDimensionsError: Resize/scale parameters are empty, zero or negative
    TransformFailedError: A resample, rotate, flip or filter primitive failed
"""


class ImageKitError(Exception):
    """Base class for all ImageKit errors."""


class NotLoadedError(ImageKitError):
    def __init__(self, message: str = "No image is loaded") -> None:
        super().__init__(message)


class UnsupportedFormatError(ImageKitError):
    pass


class DecodeFailedError(ImageKitError):
    pass


class EncodeFailedError(ImageKitError):
    pass


class InvalidColorError(ImageKitError, ValueError):
    """Raised when a color cannot be normalized.

    Callers that can fall back to a default color catch this and
    substitute the default instead of aborting.
    """


class InvalidDimensionsError(ImageKitError, ValueError):
    pass


class TransformFailedError(ImageKitError):
    pass
