"""Image tag selection from options"""

from __future__ import annotations

from neondocker.common.settings import settings
from neondocker.common.types import Options


def imageTag_select(options: Options, namespace: str = "kdeneon") -> str:
    """
    Build the Docker image tag for the requested edition.

    Args:
        options: Parsed options; edition is already validated.
        namespace: Docker Hub namespace.

    Returns:
        Tag such as `kdeneon/plasma:user`.
    """
    family = settings.IMAGE_FAMILY_ALL if options.all else settings.IMAGE_FAMILY_PLASMA
    return f"{namespace}/{family}:{options.edition.value}"
