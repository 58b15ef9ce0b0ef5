"""
Domain errors raised by the service layer.

Lookups that simply find nothing return ``None`` / ``False`` instead of
raising; routers turn those into 404 responses.  Everything else a caller
can get wrong is one of the classes below, rendered by the handler in
``blog.main`` as ``{"success": false, "error": message}``.
"""


class BlogError(Exception):
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequestError(BlogError):
    status_code = 400


class ConflictError(BlogError):
    """A unique value (e.g. an email address) is already taken."""

    status_code = 400


class InvalidCredentialsError(BlogError):
    status_code = 401

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)
