"""Resolve a -target string ("ios android/arm64 ...") into a TargetSet."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

log = logging.getLogger(__name__)

# Platform -> supported GOARCH values, in build/report order.
PLATFORM_ARCHS: dict[str, tuple[str, ...]] = {
    "ios": ("arm", "arm64", "386", "amd64"),
    "android": ("arm", "arm64", "386", "amd64"),
}

DEFAULT_PLATFORMS: tuple[str, ...] = ("android", "ios")


@dataclass(frozen=True, order=True)
class Target:
    platform: str
    arch: str

    def __str__(self) -> str:
        return f"{self.platform}/{self.arch}"


@dataclass(frozen=True)
class TargetSet:
    """Deduplicated (platform, arch) pairs plus the platforms requested."""

    platforms: frozenset[str]
    targets: frozenset[Target]

    def has_platform(self, platform: str) -> bool:
        return platform in self.platforms

    def archs(self, platform: str) -> list[str]:
        """Requested archs for platform, in PLATFORM_ARCHS order."""
        wanted = {t.arch for t in self.targets if t.platform == platform}
        return [a for a in PLATFORM_ARCHS.get(platform, ()) if a in wanted]

    def __iter__(self) -> Iterator[Target]:
        return iter(sorted(self.targets))

    def __len__(self) -> int:
        return len(self.targets)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, str):
            return item in self.platforms or any(str(t) == item for t in self.targets)
        return item in self.targets


def _classify(token: str) -> list[Target] | None:
    """Targets named by one token, or None when the token is unknown."""
    if token in PLATFORM_ARCHS:
        return [Target(token, a) for a in PLATFORM_ARCHS[token]]
    platform, sep, arch = token.partition("/")
    if sep and arch in PLATFORM_ARCHS.get(platform, ()):
        return [Target(platform, arch)]
    return None


def unknown_tokens(text: str) -> list[str]:
    """Tokens in text that parse_targets ignores."""
    return [t for t in text.split() if _classify(t) is None]


def parse_targets(text: str) -> TargetSet:
    """Parse whitespace-separated target tokens.

    Empty input means every platform in DEFAULT_PLATFORMS. A bare platform
    expands to all of its archs; "platform/arch" adds just that arch. Unknown
    tokens are skipped, not rejected; unknown_tokens lists them.
    """
    tokens = text.split() or list(DEFAULT_PLATFORMS)
    platforms: set[str] = set()
    targets: set[Target] = set()
    for token in tokens:
        named = _classify(token)
        if named is None:
            log.debug("skipping unknown target %r", token)
            continue
        platforms.add(named[0].platform)
        targets.update(named)
    return TargetSet(frozenset(platforms), frozenset(targets))
