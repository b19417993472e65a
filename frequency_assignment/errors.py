"""
Error hierarchy for the frequency assignment core.
"""


class FAPError(Exception):
    """Base error for frequency assignment operations."""


class ParseError(FAPError):
    """Problem-definition input is malformed (missing or non-numeric tokens)."""

    def __init__(self, message: str, source: str = "<input>"):
        self.source = source
        super().__init__(f"{source}: {message}")


class NotFoundError(FAPError):
    """An emitter id is not part of the problem model."""

    def __init__(self, emitter_id: str):
        self.emitter_id = emitter_id
        super().__init__(f"Unknown emitter id: {emitter_id!r}")


class InvalidGenotypeError(FAPError):
    """Genotype length does not match the encoding the decoder expects."""

    def __init__(self, expected: int, actual: int, encoding: str):
        self.expected = expected
        self.actual = actual
        self.encoding = encoding
        super().__init__(
            f"{encoding} genotype must have length {expected}, got {actual}"
        )
