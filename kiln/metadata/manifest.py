"""Version-stamped release manifest."""

from kiln.core.errors import MetadataError
from kiln.core.structlog_logger import get_struct_logger
from kiln.metadata.models import Manifest


logger = get_struct_logger(__name__)

DEFAULT_PLACEHOLDER = "@VERSION@"


class ManifestStamper:
    """Substitute a version string into a manifest template.

    Only the placeholder token changes; every other byte of the template is
    passed through.
    """

    def __init__(self, placeholder: str = DEFAULT_PLACEHOLDER) -> None:
        if not placeholder:
            raise ValueError("Placeholder must not be empty")
        self.placeholder = placeholder

    def stamp(self, template: str, version: str) -> Manifest:
        """Stamp ``version`` into ``template``.

        Raises:
            MetadataError: If the template has no placeholder
        """
        if self.placeholder not in template:
            raise MetadataError(
                "manifest",
                f"Manifest template has no {self.placeholder} placeholder",
            )
        content = template.replace(self.placeholder, version)
        logger.info("manifest_stamped", version=version)
        return Manifest(version=version, content=content)
