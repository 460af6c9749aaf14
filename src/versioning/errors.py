"""Errors raised while parsing version strings."""


class InvalidVersionFormat(ValueError):
    """Raised when a version string does not match the accepted grammar."""

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        super().__init__(f"{kind} version {value!r} is not valid.")
