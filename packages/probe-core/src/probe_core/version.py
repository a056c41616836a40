"""
Version to protocol-variant resolution.

Variant selection is a pure lookup in VARIANT_TABLE keyed by auth-plugin
discriminator and major version. Supporting a new release line means adding
a VariantRule; call sites never parse version strings themselves.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

from probe_core.errors import UnsupportedVersionError


class Variant(str, Enum):
    """Closed set of wire-protocol variants."""

    V1 = "v1"
    V2 = "v2"


class AuthPlugin(str, Enum):
    """Auth-plugin discriminator of a search distribution."""

    X_PACK = "X-Pack"
    OPEN_SEARCH = "OpenSearch"
    SEARCH_GUARD = "SearchGuard"
    OPEN_DISTRO = "OpenDistro"


class SemVer(NamedTuple):
    """Parsed major.minor.patch version."""

    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


_VERSION_RE = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)(?:[-+].*)?$")


def parse_version(version: str) -> SemVer:
    """
    Parse a semver string into a SemVer.

    Args:
        version: Version like "7.17.10", "v8.2.0" or "2.5.0-rc.1".

    Returns:
        SemVer(major, minor, patch)

    Raises:
        UnsupportedVersionError: If the string is not major.minor.patch.
    """
    match = _VERSION_RE.match(version.strip())
    if not match:
        raise UnsupportedVersionError(version)
    return SemVer(int(match.group(1)), int(match.group(2)), int(match.group(3)))


@dataclass(frozen=True)
class VariantRule:
    """
    One row of the variant table.

    Attributes:
        plugin: Discriminator the rule applies to.
        min_major: Lowest matching major version (inclusive).
        max_major: Highest matching major version (inclusive).
        variant: Variant selected when the rule matches.
    """

    plugin: AuthPlugin
    min_major: int
    max_major: int
    variant: Variant

    def matches(self, plugin: AuthPlugin, version: SemVer) -> bool:
        return plugin == self.plugin and self.min_major <= version.major <= self.max_major


VARIANT_TABLE: tuple[VariantRule, ...] = (
    VariantRule(AuthPlugin.X_PACK, 0, 7, Variant.V1),
    VariantRule(AuthPlugin.X_PACK, 8, 8, Variant.V2),
    # OpenSearch 1.x/2.x speak the same wire protocol as the 7.x line
    VariantRule(AuthPlugin.OPEN_SEARCH, 1, 2, Variant.V1),
)


def resolve_variant(
    version: str,
    plugin: AuthPlugin | str,
    table: tuple[VariantRule, ...] = VARIANT_TABLE,
) -> Variant:
    """
    Select the protocol variant for a version and auth plugin.

    Args:
        version: Engine version string.
        plugin: AuthPlugin member or its string value.
        table: Rules to search; the first match wins.

    Returns:
        The matching Variant.

    Raises:
        UnsupportedVersionError: If the version cannot be parsed, the plugin
            is unknown, or no rule matches.
    """
    try:
        discriminator = AuthPlugin(plugin)
    except ValueError:
        raise UnsupportedVersionError(version, str(plugin)) from None

    parsed = parse_version(version)
    for rule in table:
        if rule.matches(discriminator, parsed):
            return rule.variant

    raise UnsupportedVersionError(version, discriminator.value)
