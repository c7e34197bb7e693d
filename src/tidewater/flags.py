"""
Capability flags and runtime targets.

A provider (and every stream it emits) carries a set of flags. A target maps
to a FeatureSet that says which flags are required and which are disallowed.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from .errors import ConfigurationError


class Flag(str, Enum):
    # CORS headers allow any origin
    CORS_ALLOWED = "cors-allowed"
    # stream only plays from the IP that requested it (not proxy compatible)
    IP_LOCKED = "ip-locked"
    # site blocks cloudflare IPs, so a proxy hosted on cloudflare won't work
    CF_BLOCKED = "cf-blocked"


class Target(str, Enum):
    BROWSER = "browser"                        # browser with CORS restrictions
    BROWSER_EXTENSION = "browser-extension"    # browser, CORS lifted by an extension
    NATIVE = "native"                          # native app, anything plays
    ANY = "any"


@dataclass(frozen=True)
class FeatureSet:
    requires: frozenset = field(default_factory=frozenset)
    disallowed: frozenset = field(default_factory=frozenset)


_TARGET_FEATURES: dict[Target, tuple[frozenset, frozenset]] = {
    Target.BROWSER: (frozenset({Flag.CORS_ALLOWED}), frozenset()),
    Target.BROWSER_EXTENSION: (frozenset(), frozenset()),
    Target.NATIVE: (frozenset(), frozenset()),
    Target.ANY: (frozenset(), frozenset()),
}


def get_target_features(target: Target | str, consistent_ip_for_requests: bool = False) -> FeatureSet:
    """Feature set for a target. IP-locked providers are only allowed when the
    caller guarantees one client IP for the whole scrape session."""
    try:
        target = Target(target)
    except ValueError:
        raise ConfigurationError(f"Unknown target: {target!r}") from None

    requires, disallowed = _TARGET_FEATURES[target]
    if not consistent_ip_for_requests:
        disallowed = disallowed | {Flag.IP_LOCKED}
    return FeatureSet(requires=requires, disallowed=disallowed)


def flag_values(flags: Iterable[str]) -> frozenset:
    # Enum members hash by name, so compare on the plain string values
    return frozenset(getattr(f, "value", f) for f in flags or ())


def flags_allowed_in_features(features: FeatureSet, flags: Iterable[str]) -> bool:
    flags = flag_values(flags)
    if not flag_values(features.requires) <= flags:
        return False
    if flag_values(features.disallowed) & flags:
        return False
    return True
