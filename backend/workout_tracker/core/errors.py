class NotAuthenticatedError(Exception):
    """The request carries no valid sign-in token for an active user."""
