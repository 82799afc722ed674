class FetchError(Exception):
    detail: str = "Fetch failed."

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.__class__.detail
        super().__init__(self.detail)


class UnsupportedMethodError(FetchError):
    detail = "Unsupported HTTP method."


class EncodingError(FetchError):
    detail = "Request body could not be encoded."


class DecodingError(FetchError):
    detail = "Error decoding JSON."


class FileAccessError(FetchError):
    detail = "File doesn't exist or isn't readable."


class TransportError(FetchError):
    """Connection, send or receive failure. No HTTP response was parsed."""

    detail = "Transport failure."
