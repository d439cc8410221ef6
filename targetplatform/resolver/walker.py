"""
Recursive repository reference walker.

Loads a root metadata repository and, depth first, every metadata
repository reachable through its enabled references. Artifact references
are only registered for lazy loading; artifact repositories are leaves of
the walk and their own references are never followed.
"""
import logging
from collections import OrderedDict
from typing import Dict, List, Optional

from targetplatform.errors import ProvisionError, RepositoryLoadError
from targetplatform.id_registry import NullIdRegistry, RepositoryIdRegistry
from targetplatform.progress import SubMonitor
from targetplatform.repository.base import (
    MetadataRepository,
    MetadataRepositoryManager,
    RepositoryKind,
    normalize_location,
)
from targetplatform.repository.lazy import ArtifactLoader, LazyArtifactRegistry

logger = logging.getLogger(__name__)

# Share of a repository's progress budget spent on loading it
LOAD_WORK = 50
TOTAL_WORK = 100


class ReferenceWalker:
    """
    Collects the metadata repositories and artifact locations of one resolution pass.

    The visited map and artifact registry belong to this walker only; create
    one walker per pass.
    """

    def __init__(
        self,
        metadata_manager: MetadataRepositoryManager,
        artifact_loader: ArtifactLoader,
        include_references: bool = True,
        id_registry: Optional[RepositoryIdRegistry] = None
    ):
        self.metadata_manager = metadata_manager
        self.artifact_loader = artifact_loader
        self.include_references = include_references
        self.id_registry = id_registry if id_registry is not None else NullIdRegistry()
        self.visited: Dict[str, MetadataRepository] = OrderedDict()
        self.artifacts = LazyArtifactRegistry()

    @property
    def metadata_repositories(self) -> List[MetadataRepository]:
        """Loaded repositories: root first, then depth-first discovery order."""
        return list(self.visited.values())

    def register_artifact_repository(self, location: str) -> None:
        """Record an artifact repository location without loading it."""
        self.artifacts.register(location, self.artifact_loader)

    def walk(self, location: str, repository_id: Optional[str] = None, monitor=None) -> None:
        """
        Load location and, if references are included, everything it references.

        Args:
            location: Repository location URI
            repository_id: Symbolic id recorded in the id registry
            monitor: Progress monitor; cancellation is checked before each load

        Raises:
            RepositoryLoadError: If any repository in the closure fails to load
            ResolutionCanceledError: If the monitor was canceled
        """
        key = normalize_location(location)
        if key in self.visited:
            logger.debug(f"Metadata repository {location} already loaded, skipping")
            return

        sub_monitor = SubMonitor.convert(monitor, TOTAL_WORK)
        load_monitor = sub_monitor.split(LOAD_WORK)

        logger.info(f"Loading metadata repository {location}")
        try:
            repository = self.metadata_manager.load_repository(location, load_monitor)
        except ProvisionError as e:
            raise RepositoryLoadError(location, e) from e
        load_monitor.done()
        # Must precede reference traversal so cycles terminate
        self.visited[key] = repository

        self._add_id_mapping(repository_id, location)

        if not self.include_references:
            sub_monitor.done()
            return

        references = repository.references
        sub_monitor.set_work_remaining(len(references))
        for reference in references:
            if not reference.is_enabled:
                logger.debug(f"Skipping disabled reference {reference.location} from {location}")
                continue
            if reference.kind is RepositoryKind.METADATA:
                self.walk(reference.location, reference.nickname, sub_monitor.split(1))
            elif reference.kind is RepositoryKind.ARTIFACT:
                self.register_artifact_repository(reference.location)
                sub_monitor.worked(1)
        sub_monitor.done()

    def _add_id_mapping(self, repository_id: Optional[str], location: str) -> None:
        # Best effort: the registry is shared state owned by someone else
        try:
            self.id_registry.add_mapping(repository_id, location)
        except Exception as e:
            logger.debug(f"Ignoring id mapping failure for {repository_id} -> {location}: {e}")
