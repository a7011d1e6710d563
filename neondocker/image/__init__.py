"""Docker image tag selection."""

from neondocker.image.selector import imageTag_select

__all__ = ["imageTag_select"]
