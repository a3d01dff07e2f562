"""Request context carrying the authenticated identity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Identity of the user making the request.

    A user's role (tourist or provider) is derived per booking, never
    stored here.
    """

    user_id: str
