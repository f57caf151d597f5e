"""Errors raised at the serialization boundary."""


class DecodeError(ValueError):
    """
    Raised when wire data cannot be turned into a job record.

    Attributes:
        path: Dotted path of the offending field ("" for the document root),
            e.g. "spec.refs.pulls[1].number"
        message: What was wrong with the value at that path
    """

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path or '<root>'}: {message}")
