"""Version matching over declared manifest versions.

Specifiers are either ``"latest"`` or an npm-style SemVer range. Everything
here is pure: the same inputs always select the same version.

Range grammar:
- ``*``, ``x`` or empty: any release
- ``1.2.3``, ``=1.2.3``, ``v1.2.3``: exact
- ``>=1.2.0 <2.0.0``: whitespace-joined comparators must all hold
- ``^1.2.3 || ~2.1``: alternatives
- ``^``/``~``: caret and tilde ranges, ``1.x``/``1.2``: x-ranges
- ``1.0.0 - 2.0.0``: inclusive hyphen range

Pre-release versions only satisfy a comparator set that itself names a
pre-release on the same major.minor.patch.
"""

import re
from collections.abc import Iterable

from semver import Version

from parca.errors import NoMatchingVersionError

LATEST = "latest"

Comparator = tuple[str, Version]

_PARTIAL_RE = re.compile(
    r"^(\d+|[xX*])(?:\.(\d+|[xX*]))?(?:\.(\d+|[xX*]))?"
    r"(?:-([0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$"
)
_TOKEN_RE = re.compile(r"^(<=|>=|<|>|=|\^|~)?v?(.*)$")
_HYPHEN_RE = re.compile(r"^\s*(\S+)\s+-\s+(\S+)\s*$")
_OPERATOR_GAP_RE = re.compile(r"(<=|>=|<|>|=|\^|~)\s+")

Partial = tuple[int | None, int | None, int | None, str | None]


def is_semver(version: str) -> bool:
    return Version.is_valid(version)


def _sort_key(version: str) -> tuple[Version, str]:
    return (Version.parse(version), version)


def sort_versions(declared: Iterable[str]) -> list[str]:
    """Order versions ascending: non-SemVer strings first, then by SemVer precedence."""
    candidates = list(declared)
    invalid = sorted(v for v in candidates if not is_semver(v))
    valid = sorted((v for v in candidates if is_semver(v)), key=_sort_key)
    return invalid + valid


def latest_version(declared: Iterable[str]) -> str | None:
    """Select the maximal declared version.

    SemVer precedence decides among valid versions (pre-releases included);
    when nothing is SemVer-valid the lexicographically greatest string is
    returned.
    """
    candidates = list(declared)
    if not candidates:
        return None

    valid = [v for v in candidates if is_semver(v)]
    if not valid:
        return max(candidates)
    return max(valid, key=_sort_key)


def _parse_partial(text: str) -> Partial:
    match = _PARTIAL_RE.match(text)
    if match is None:
        raise ValueError(f"Invalid version in range: {text!r}")

    numbers: list[int | None] = []
    wildcard = False
    for part in match.group(1, 2, 3):
        if wildcard or part is None or part in ("x", "X", "*"):
            wildcard = True
            numbers.append(None)
        else:
            numbers.append(int(part))
    prerelease = match.group(4) if numbers[2] is not None else None
    return numbers[0], numbers[1], numbers[2], prerelease


def _floor(partial: Partial) -> Version:
    major, minor, patch, prerelease = partial
    return Version(major or 0, minor or 0, patch or 0, prerelease=prerelease)


def _next_boundary(partial: Partial) -> Version:
    """Smallest version above every version matched by a partial (``1.2`` -> ``1.3.0``)."""
    major, minor, _patch, _pre = partial
    if major is None:
        raise ValueError("A wildcard partial has no upper boundary")
    if minor is None:
        return Version(major + 1, 0, 0)
    return Version(major, minor + 1, 0)


def _desugar(op: str, partial: Partial) -> list[Comparator]:
    major, minor, patch, _pre = partial
    floor = _floor(partial)

    if major is None:
        # Wildcard: anything for inclusive ops, nothing for exclusive ones.
        if op in (">", "<"):
            return [("<", Version(0, 0, 0))]
        return []

    is_full = patch is not None

    if op in ("", "="):
        if is_full:
            return [("=", floor)]
        return [(">=", floor), ("<", _next_boundary(partial))]
    if op == ">":
        if is_full:
            return [(">", floor)]
        return [(">=", _next_boundary(partial))]
    if op == ">=":
        return [(">=", floor)]
    if op == "<":
        return [("<", floor)]
    if op == "<=":
        if is_full:
            return [("<=", floor)]
        return [("<", _next_boundary(partial))]
    if op == "~":
        if minor is None:
            return [(">=", floor), ("<", Version(major + 1, 0, 0))]
        return [(">=", floor), ("<", Version(major, minor + 1, 0))]
    if op == "^":
        if major > 0 or minor is None:
            upper = Version(major + 1, 0, 0)
        elif minor > 0 or patch is None:
            upper = Version(0, minor + 1, 0)
        else:
            upper = Version(0, 0, patch + 1)
        return [(">=", floor), ("<", upper)]

    raise ValueError(f"Unknown range operator: {op!r}")


def _parse_comparator_set(text: str) -> list[Comparator]:
    hyphen = _HYPHEN_RE.match(text)
    if hyphen is not None:
        low = _parse_partial(hyphen.group(1).lstrip("v="))
        high = _parse_partial(hyphen.group(2).lstrip("v="))
        comparators = _desugar(">=", low)
        comparators.extend(_desugar("<=", high))
        return comparators

    comparators: list[Comparator] = []
    for token in _OPERATOR_GAP_RE.sub(r"\1", text).split():
        match = _TOKEN_RE.match(token)
        if match is None:
            raise ValueError(f"Invalid comparator: {token!r}")
        comparators.extend(_desugar(match.group(1) or "", _parse_partial(match.group(2))))
    return comparators


def parse_range(specifier: str) -> list[list[Comparator]]:
    """Parse a range into alternatives of comparator sets.

    Raises:
        ValueError: If the range is malformed
    """
    return [_parse_comparator_set(part) for part in specifier.split("||")]


def _holds(version: Version, op: str, bound: Version) -> bool:
    if op == "=":
        return version == bound
    if op == ">":
        return version > bound
    if op == ">=":
        return version >= bound
    if op == "<":
        return version < bound
    return version <= bound


def _prerelease_allowed(version: Version, comparators: list[Comparator]) -> bool:
    if version.prerelease is None:
        return True
    core = (version.major, version.minor, version.patch)
    return any(
        bound.prerelease is not None and (bound.major, bound.minor, bound.patch) == core
        for _op, bound in comparators
    )


def satisfies(version: str, alternatives: list[list[Comparator]]) -> bool:
    parsed = Version.parse(version)
    for comparators in alternatives:
        if not _prerelease_allowed(parsed, comparators):
            continue
        if all(_holds(parsed, op, bound) for op, bound in comparators):
            return True
    return False


def max_satisfying(declared: Iterable[str], specifier: str) -> str | None:
    """Return the highest SemVer-valid declared version inside the range, if any."""
    try:
        alternatives = parse_range(specifier)
    except ValueError:
        return None

    matching = [v for v in declared if is_semver(v) and satisfies(v, alternatives)]
    if not matching:
        return None
    return max(matching, key=_sort_key)


def pick_version(declared: Iterable[str], specifier: str, *, asset_id: str) -> str:
    """Pick exactly one declared version for a specifier.

    Args:
        declared: Version strings declared in the manifest
        specifier: "latest" or a SemVer range
        asset_id: Asset the versions belong to (for error messages)

    Returns:
        The selected version string

    Raises:
        NoMatchingVersionError: If nothing satisfies the specifier
    """
    versions = list(declared)
    if specifier == LATEST:
        selected = latest_version(versions)
    else:
        selected = max_satisfying(versions, specifier)

    if selected is None:
        raise NoMatchingVersionError(asset_id, specifier, versions)
    return selected
