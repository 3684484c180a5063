"""Package inclusion rules.

Which packages bundle the gala dinner and workshops is defined once here;
callers never compare package strings themselves.
"""

from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Optional, Union


class PackageType(str, Enum):
    FULL = "full"
    EVENING = "evening"
    CUSTOM = "custom"
    PREMIUM_4_NIGHTS = "premium-accommodation-4nights"
    PREMIUM_3_NIGHTS = "premium-accommodation-3nights"


class Role(str, Enum):
    LEADER = "leader"
    FOLLOWER = "follower"
    COUPLE = "couple"


GALA_INCLUDED_PACKAGES: FrozenSet[PackageType] = frozenset(
    {
        PackageType.FULL,
        PackageType.PREMIUM_4_NIGHTS,
        PackageType.PREMIUM_3_NIGHTS,
        PackageType.EVENING,
    }
)

WORKSHOP_INCLUDED_PACKAGES: FrozenSet[PackageType] = frozenset(
    {
        PackageType.FULL,
        PackageType.PREMIUM_4_NIGHTS,
        PackageType.PREMIUM_3_NIGHTS,
    }
)

INCLUDED_WORKSHOP_LIMIT = 6

ACCOMMODATION_NIGHTS = {
    PackageType.PREMIUM_4_NIGHTS: 4,
    PackageType.PREMIUM_3_NIGHTS: 3,
}


def coerce_package(value: Union[str, PackageType, None]) -> Optional[PackageType]:
    """Return the PackageType for a raw value, or None when unknown."""
    if value is None:
        return None
    try:
        return PackageType(value)
    except ValueError:
        return None


def coerce_role(value: Union[str, Role, None]) -> Optional[Role]:
    if value is None:
        return None
    try:
        return Role(value)
    except ValueError:
        return None


def is_gala_included(package_type: Union[str, PackageType, None]) -> bool:
    return coerce_package(package_type) in GALA_INCLUDED_PACKAGES


def includes_workshops(package_type: Union[str, PackageType, None]) -> bool:
    return coerce_package(package_type) in WORKSHOP_INCLUDED_PACKAGES


def accommodation_nights(package_type: Union[str, PackageType, None]) -> Optional[int]:
    pkg = coerce_package(package_type)
    return ACCOMMODATION_NIGHTS.get(pkg) if pkg is not None else None


def seats_multiplier(role: Union[str, Role, None]) -> int:
    """Couples occupy two seats and pay per-person prices twice."""
    return 2 if coerce_role(role) is Role.COUPLE else 1
