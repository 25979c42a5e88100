class ZipkinError(Exception):
    """Custom error to be raised on Zipkin exceptions."""
