# pylint: disable=line-too-long
"""
Utility functions shared by the Destiny 2 API client and the manifest lookup.

This module provides:
    - Manifest hash reinterpretation between the API (unsigned) and the database (signed)
    - Component query parameter building
    - Bungie Platform URL construction
    - Batching helpers for parameterized SQL
"""
import ctypes
from typing import Iterable, Iterator, Sequence

UINT32_MAX = 0xFFFFFFFF


def convert_hash(item_hash: int | str) -> int:
    """
    Convert an unsigned 32-bit Destiny hash to the signed key stored in the manifest database.

    The conversion reinterprets the same 32 bits as a two's complement integer, so
    hashes at or above 2**31 become negative keys.

    Args:
        item_hash (int or str): Unsigned 32-bit hash from the API.

    Returns:
        int: Signed 32-bit manifest key.

    Raises:
        ValueError: If the hash is not an integer in [0, 2**32 - 1].
    """
    h = int(item_hash)
    if h < 0 or h > UINT32_MAX:
        raise ValueError(f"Hash {item_hash} is not an unsigned 32-bit value")
    return ctypes.c_int32(h).value


def to_unsigned_hash(key: int) -> int:
    """
    Reinterpret a signed manifest key as the unsigned hash the API uses.

    Args:
        key (int): Signed 32-bit manifest key.

    Returns:
        int: Unsigned 32-bit hash.
    """
    return ctypes.c_uint32(int(key)).value


def convert_hashes(hashes: Iterable[int | str]) -> set[int]:
    """
    Convert many hashes to manifest keys; duplicates collapse.

    Args:
        hashes (Iterable[int | str]): Unsigned hashes.

    Returns:
        set[int]: Distinct signed manifest keys.
    """
    return {convert_hash(h) for h in hashes}


def build_components_query(components: Iterable[int]) -> tuple[str, str]:
    """
    Build the ``components`` query item from component type codes.

    Args:
        components (Iterable[int]): DestinyComponentType values.

    Returns:
        tuple: ("components", comma-joined integer codes).
    """
    return "components", ",".join(str(int(c)) for c in components)


def build_platform_url(base_url: str, method: str, query_items: Sequence[tuple[str, str]] | None = None) -> str:
    """
    Build ``{base_url}/Platform/{method}/`` with an optional query string.

    Slashes around the method are normalized so the URL always has exactly one
    trailing slash before the query.

    Args:
        base_url (str): API host, e.g. https://www.bungie.net.
        method (str): API method path, e.g. Destiny2/Manifest.
        query_items (Sequence[tuple[str, str]], optional): Query name/value pairs.

    Returns:
        str: Fully qualified request URL.
    """
    url = f"{base_url.rstrip('/')}/Platform/{method.strip('/')}/"
    if query_items:
        url += "?" + "&".join(f"{name}={value}" for name, value in query_items)
    return url


def chunks(items: Sequence, size: int) -> Iterator[Sequence]:
    """Yield consecutive slices of at most ``size`` items."""
    for i in range(0, len(items), size):
        yield items[i:i + size]
