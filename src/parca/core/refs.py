"""Decide which ref supplies the bytes of a manifest version."""

from parca.errors import ManifestFormatError
from parca.models.manifest import ManifestVersion

# A version opts into the manifest's version-strategy template with this ref.
TEMPLATE_REF = "@template"

VERSION_PLACEHOLDER = "{{version}}"


def effective_ref(
    version_meta: ManifestVersion,
    registry_ref: str,
    *,
    version: str,
    template: str | None,
) -> str:
    """Return the ref to resolve for a version.

    Priority: explicit ref on the version, else the ref the manifest was read
    at. The manifest template is never a fallback for rolling versions; it only
    applies when the version's ref is ``@template``.

    Args:
        version_meta: The manifest entry for the version
        registry_ref: Ref (branch or locked commit) the manifest was fetched at
        version: The version string, substituted into the template
        template: The manifest's version-strategy template, if any

    Raises:
        ManifestFormatError: If the version opts into a template the manifest lacks
    """
    if version_meta.ref is None:
        return registry_ref

    if version_meta.ref == TEMPLATE_REF:
        if not template:
            raise ManifestFormatError(
                f'Version "{version}" uses {TEMPLATE_REF} but the manifest has no '
                f"version-strategy template"
            )
        return template.replace(VERSION_PLACEHOLDER, version)

    return version_meta.ref
