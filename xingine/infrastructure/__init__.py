from xingine.infrastructure.http_client import ApiCallError, HttpApiClient

__all__ = [
    "ApiCallError",
    "HttpApiClient",
]
