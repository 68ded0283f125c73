"""Authentication helpers and route dependencies."""

from typing import Annotated

from fastapi import Depends, Header

from holiday_promo.errors import Unauthenticated


def get_current_user_id(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> str | None:
    """
    Return the caller identity forwarded by the authenticating gateway.

    Sign-in happens upstream; this service only trusts the header it sets.
    A missing or blank header means an anonymous caller.
    """

    if x_user_id is None:
        return None
    return x_user_id.strip() or None


def require_user_id(
    user_id: Annotated[str | None, Depends(get_current_user_id)],
) -> str:
    """Reject anonymous callers of mutations."""

    if user_id is None:
        raise Unauthenticated()
    return user_id


OptionalUserDependency = Annotated[str | None, Depends(get_current_user_id)]
UserDependency = Annotated[str, Depends(require_user_id)]
