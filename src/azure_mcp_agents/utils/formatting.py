"""
Helpers for turning Azure DevOps SDK objects into tool responses.
"""
import json
import re
from datetime import datetime
from typing import Any, Callable, Iterator, Optional

from azure.devops.exceptions import AzureDevOpsServiceError

# Optional sign and ASCII digits, surrounding whitespace allowed
_INTEGER = re.compile(r"\s*[+-]?[0-9]+\s*")
INT32_MAX = 2**31 - 1


def json_result(value: Any) -> str:
    return json.dumps(value)


def error_result(message: str) -> str:
    """Serialize the uniform error shape returned by every tool."""
    return json.dumps({"error": message})


def parse_positive_int(raw: Optional[str]) -> Optional[int]:
    """
    Parse a numeric string as a positive 32-bit integer.

    Returns:
        The parsed value, or None if the string is empty, not a plain decimal
        integer, not positive or larger than 2147483647
    """
    if raw is None or not _INTEGER.fullmatch(str(raw)):
        return None
    value = int(str(raw))
    return value if 0 < value <= INT32_MAX else None


def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def display_name(identity: Any) -> Optional[str]:
    """
    Get the display name of an identity reference.

    The SDK returns IdentityRef models for typed attributes but plain dicts
    inside work item field bags.
    """
    if identity is None:
        return None
    if isinstance(identity, dict):
        return identity.get("displayName")
    return getattr(identity, "display_name", None)


def web_url(resource: Any) -> str:
    """
    Resolve the "web" link relation of a resource, or "" if there is none.

    msrest keeps unknown keys of ReferenceLinks in additional_properties, so
    both places are checked.
    """
    links = getattr(resource, "_links", None)
    if links is None:
        return ""

    relations = {}
    if isinstance(links, dict):
        relations.update(links)
    else:
        relations.update(getattr(links, "additional_properties", None) or {})
        relations.update(getattr(links, "links", None) or {})

    link = relations.get("web")
    if isinstance(link, dict):
        return link.get("href") or ""
    return getattr(link, "href", None) or ""


def is_not_found(error: Exception) -> bool:
    """Whether an SDK error reports a missing remote entity."""
    if not isinstance(error, AzureDevOpsServiceError):
        return False
    type_key = getattr(error, "type_key", None) or ""
    return type_key.endswith("NotFoundException")


def iterate_pages(fetch: Callable[..., Any], **kwargs) -> Iterator[Any]:
    """
    Yield every item of a paged SDK call, following continuation tokens.

    Args:
        fetch: SDK method returning an object with ``value`` and ``continuation_token``
        **kwargs: Arguments passed to every call
    """
    continuation_token = None
    while True:
        response = fetch(continuation_token=continuation_token, **kwargs)
        if response is None:
            return
        yield from (response.value or [])
        continuation_token = response.continuation_token
        if not continuation_token:
            return
