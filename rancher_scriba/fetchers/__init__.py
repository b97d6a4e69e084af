"""Entity fetchers for the Rancher API and offline fixtures."""

from .base import BaseFetcher
from .rancher import RancherFetcher
from .static import StaticFetcher

__all__ = ["BaseFetcher", "RancherFetcher", "StaticFetcher"]
