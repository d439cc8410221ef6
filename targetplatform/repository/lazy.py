"""
Lazily loaded artifact repositories.

Artifact indexes can be large, and a build that only needs dependency
resolution never looks an artifact up. Locations are therefore only
recorded during resolution; the repository is loaded on first lookup.
"""
import logging
import threading
from collections import OrderedDict
from typing import Callable, Dict, List, Optional

from targetplatform.errors import ProvisionError, RepositoryLoadError
from targetplatform.repository.base import (
    ArtifactPredicate,
    ArtifactRepository,
    normalize_location,
)
from targetplatform.repository.schema import ArtifactDescriptor

logger = logging.getLogger(__name__)

ArtifactLoader = Callable[[str], ArtifactRepository]


class LazyArtifactRepository(ArtifactRepository):
    """
    Artifact repository that loads its delegate on first use.

    The loader runs at most once per successful load; a failed load is not
    cached, so the next lookup tries again.
    """

    def __init__(self, location: str, loader: ArtifactLoader):
        self._location = location
        self._loader = loader
        self._delegate: Optional[ArtifactRepository] = None
        self._lock = threading.Lock()

    @property
    def location(self) -> str:
        return self._location

    @property
    def is_materialized(self) -> bool:
        return self._delegate is not None

    def materialize(self) -> ArtifactRepository:
        """
        Load the delegate repository if not loaded yet.

        Raises:
            RepositoryLoadError: If the loader fails
        """
        with self._lock:
            if self._delegate is None:
                logger.info(f"Loading artifact repository {self._location}")
                try:
                    self._delegate = self._loader(self._location)
                except ProvisionError as e:
                    raise RepositoryLoadError(self._location, e, kind="artifact") from e
            return self._delegate

    def query(self, predicate: ArtifactPredicate, monitor=None) -> List[ArtifactDescriptor]:
        return self.materialize().query(predicate, monitor)

    def __repr__(self) -> str:
        state = "loaded" if self.is_materialized else "deferred"
        return f"LazyArtifactRepository({self._location!r}, {state})"


class LazyArtifactRegistry:
    """
    Ordered registry of deferred artifact repositories keyed by normalized location.

    Registration never triggers a load; the first binding for a location wins.
    """

    def __init__(self):
        self._repositories: Dict[str, LazyArtifactRepository] = OrderedDict()

    def register(self, location: str, loader: ArtifactLoader) -> bool:
        """
        Record an artifact repository location.

        Returns:
            True if the location was new, False if it was already registered
        """
        key = normalize_location(location)
        if key in self._repositories:
            logger.debug(f"Artifact repository {location} already registered")
            return False
        self._repositories[key] = LazyArtifactRepository(location, loader)
        return True

    def materialize(self, location: str) -> ArtifactRepository:
        """
        Load (once) and return the artifact repository registered for location.

        Raises:
            KeyError: If the location was never registered
            RepositoryLoadError: If loading fails
        """
        key = normalize_location(location)
        if key not in self._repositories:
            raise KeyError(f"Artifact repository not registered: {location}")
        return self._repositories[key].materialize()

    def __contains__(self, location: str) -> bool:
        return normalize_location(location) in self._repositories

    def __len__(self) -> int:
        return len(self._repositories)

    def repositories(self) -> List[LazyArtifactRepository]:
        """Registered repositories in registration order."""
        return list(self._repositories.values())
