class BackendIOException(Exception):
    """Raised when the key-value backend fails for any reason other than a failed condition."""

    def __init__(self, message, operation, key=None, *args: object) -> None:
        super().__init__(message, *args)
        self.operation = operation
        self.key = key
