from fluentrest.core.rest import CancelToken, RestClient, Result

__all__ = ["CancelToken", "RestClient", "Result"]
