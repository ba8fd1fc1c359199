class PhotosynthError(Exception):
    """Base class for errors raised by the photosynth package."""


class UnknownEnvironmentField(PhotosynthError, ValueError):
    """Raised when a write targets a field the environment does not have."""

    def __init__(self, field: str):
        super().__init__(
            f"UNKNOWN_FIELD_ERROR: '{field}' is not an environment field "
            "(expected one of light, co2, water, temperature)."
        )
        self.field = field


class InvalidEnvironmentValue(PhotosynthError, ValueError):
    """Raised when a write carries a value that is not a finite number."""

    def __init__(self, field: str, value: object):
        super().__init__(
            f"INVALID_VALUE_ERROR: {value!r} is not a finite number for field '{field}'."
        )
        self.field = field
        self.value = value


class NarrationUnavailable(PhotosynthError, RuntimeError):
    """Raised by the narration transport when the text service cannot answer."""
