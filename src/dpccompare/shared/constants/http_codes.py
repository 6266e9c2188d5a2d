"""HTTP status codes the API clients branch on."""


class HTTPStatusCodes:
    """Status codes and ranges used by JsonHttpClient."""

    OK = 200
    TOO_MANY_REQUESTS = 429

    @staticmethod
    def is_success(code: int) -> bool:
        return 200 <= code < 300
