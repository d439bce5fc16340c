class DateOrderingError(ValueError):
    """A date breaks a temporal rule (e.g. marriage before the minimum age).

    Always recoverable: the caller shows ``message`` next to ``field``.
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class RootInvariantError(Exception):
    """A tree does not have exactly one parentless root person."""

    def __init__(self, diagnostics: list[str]):
        super().__init__("; ".join(diagnostics))
        self.diagnostics = diagnostics
