"""
Request dependencies shared by the routers.

Authentication happens upstream. The identity provider forwards the
acting user's opaque id in the X-User-Id header and the core trusts it
as given.
"""

from typing import Annotated

from fastapi import Header, Query

from cardex.models.failure import UnauthorizedError


async def current_user(
    x_user_id: Annotated[str | None, Header(description="Acting user's id")] = None,
) -> str:
    """Resolve the acting user, or fail with 401 if none was supplied."""
    if x_user_id is None or not x_user_id.strip():
        raise UnauthorizedError("No active user", detail="Missing X-User-Id header")
    return x_user_id.strip()


def parse_tag_list(raw: str) -> list[str]:
    """Split a comma-separated tag list, dropping blanks."""
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


async def tag_query(
    tags: Annotated[str, Query(description="Comma-separated tags", examples=["red,rare"])] = "",
) -> list[str]:
    """Tags passed as ?tags=a,b."""
    return parse_tag_list(tags)
