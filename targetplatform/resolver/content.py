"""
Target definition content for one repository location.

Resolves a location and the repositories it references exactly once, then
serves the merged metadata view and the lazily loaded artifact view.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from targetplatform.agent import ProvisioningAgent
from targetplatform.config import ReferencedRepositoryMode
from targetplatform.errors import MissingServiceError, ResolutionCanceledError
from targetplatform.progress import SubMonitor
from targetplatform.repository.base import (
    ArtifactRepository,
    MetadataRepository,
    UnitPredicate,
)
from targetplatform.repository.composite import (
    merge_artifact_repositories,
    merge_metadata_repositories,
)
from targetplatform.repository.lazy import LazyArtifactRepository
from targetplatform.repository.schema import InstallableUnit
from targetplatform.resolver.single_flight import CellState, SingleFlightCell
from targetplatform.resolver.walker import ReferenceWalker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedContent:
    """Merged views produced by one successful resolution."""
    metadata_repository: MetadataRepository
    artifact_repository: ArtifactRepository
    metadata_repositories: Tuple[MetadataRepository, ...]
    artifact_repositories: Tuple[LazyArtifactRepository, ...]


class UriTargetContent:
    """
    Content of a target definition location.

    Resolution happens on first access and is single-flight: concurrent
    callers share one computation and a successful result is never
    recomputed. A failed resolution is not cached unless cache_failures is
    set, so the next call starts over. Cancellation is never cached.
    """

    def __init__(
        self,
        agent: ProvisioningAgent,
        location: str,
        repository_id: Optional[str] = None,
        referenced_mode: ReferencedRepositoryMode = ReferencedRepositoryMode.INCLUDE,
        cache_failures: bool = False
    ):
        self.agent = agent
        self.location = location
        self.repository_id = repository_id
        self.referenced_mode = ReferencedRepositoryMode(referenced_mode)
        self._content: SingleFlightCell[ResolvedContent] = SingleFlightCell(
            cache_failures=cache_failures,
            cacheable=lambda error: not isinstance(error, ResolutionCanceledError)
        )

    @property
    def is_resolved(self) -> bool:
        return self._content.state is CellState.DONE

    def query(self, predicate: UnitPredicate, monitor=None) -> List[InstallableUnit]:
        """
        Resolve if needed, then return the units of the merged view matching predicate.

        Raises:
            RepositoryLoadError: If a repository in the closure cannot be loaded
            MissingServiceError: If the agent has no metadata repository manager
        """
        sub_monitor = SubMonitor.convert(monitor, 200)
        resolve_monitor = sub_monitor.split(100)
        content = self.ensure_resolved(resolve_monitor)
        resolve_monitor.done()

        sub_monitor.set_work_remaining(100)
        query_monitor = sub_monitor.split(100)
        units = content.metadata_repository.query(predicate, query_monitor)
        query_monitor.done()
        return units

    @property
    def metadata_repository(self) -> MetadataRepository:
        return self.ensure_resolved().metadata_repository

    @property
    def artifact_repository(self) -> ArtifactRepository:
        return self.ensure_resolved().artifact_repository

    def ensure_resolved(self, monitor=None) -> ResolvedContent:
        """Return the resolved content, resolving on first call."""
        return self._content.get(lambda: self._resolve(monitor))

    def _resolve(self, monitor) -> ResolvedContent:
        metadata_manager = self.agent.metadata_manager
        if metadata_manager is None:
            raise MissingServiceError("No metadata repository manager available from provisioning agent")

        walker = ReferenceWalker(
            metadata_manager,
            self._load_artifact_repository,
            include_references=self.referenced_mode is ReferencedRepositoryMode.INCLUDE,
            id_registry=self.agent.id_registry
        )
        walker.register_artifact_repository(self.location)
        walker.walk(self.location, self.repository_id, monitor)

        metadata_repositories = tuple(walker.metadata_repositories)
        artifact_repositories = tuple(walker.artifacts.repositories())
        logger.info(
            f"Resolved {self.location}: {len(metadata_repositories)} metadata and "
            f"{len(artifact_repositories)} artifact repositories"
        )

        return ResolvedContent(
            metadata_repository=merge_metadata_repositories(metadata_repositories),
            artifact_repository=merge_artifact_repositories(artifact_repositories),
            metadata_repositories=metadata_repositories,
            artifact_repositories=artifact_repositories
        )

    def _load_artifact_repository(self, location: str) -> ArtifactRepository:
        artifact_manager = self.agent.artifact_manager
        if artifact_manager is None:
            raise MissingServiceError("No artifact repository manager available from provisioning agent")
        return artifact_manager.load_repository(location)

    def __repr__(self) -> str:
        return f"UriTargetContent({self.location!r}, id={self.repository_id!r}, mode={self.referenced_mode.value})"
