"""
Composite repository views.

Presents several loaded repositories as one. Members are visited in the
order given and results are concatenated without deduplication; picking
between identical or conflicting units is left to the consumer.
"""
from typing import List, Sequence

from targetplatform.progress import SubMonitor
from targetplatform.repository.base import (
    ArtifactPredicate,
    ArtifactRepository,
    MetadataRepository,
    Reference,
    UnitPredicate,
)
from targetplatform.repository.schema import ArtifactDescriptor, InstallableUnit


def _composite_location(members: Sequence) -> str:
    return "composite:" + ",".join(member.location for member in members)


class CompositeMetadataRepository(MetadataRepository):
    """Read-only merge of metadata repositories."""

    def __init__(self, members: Sequence[MetadataRepository]):
        self.members = tuple(members)

    @property
    def location(self) -> str:
        return _composite_location(self.members)

    @property
    def references(self) -> List[Reference]:
        return [reference for member in self.members for reference in member.references]

    def query(self, predicate: UnitPredicate, monitor=None) -> List[InstallableUnit]:
        sub_monitor = SubMonitor.convert(monitor, max(len(self.members), 1))
        results: List[InstallableUnit] = []
        for member in self.members:
            member_monitor = sub_monitor.split(1)
            results.extend(member.query(predicate, member_monitor))
            member_monitor.done()
        sub_monitor.done()
        return results

    def __repr__(self) -> str:
        return f"CompositeMetadataRepository({list(self.members)!r})"


class CompositeArtifactRepository(ArtifactRepository):
    """Read-only merge of artifact repositories."""

    def __init__(self, members: Sequence[ArtifactRepository]):
        self.members = tuple(members)

    @property
    def location(self) -> str:
        return _composite_location(self.members)

    def query(self, predicate: ArtifactPredicate, monitor=None) -> List[ArtifactDescriptor]:
        sub_monitor = SubMonitor.convert(monitor, max(len(self.members), 1))
        results: List[ArtifactDescriptor] = []
        for member in self.members:
            member_monitor = sub_monitor.split(1)
            results.extend(member.query(predicate, member_monitor))
            member_monitor.done()
        sub_monitor.done()
        return results

    def __repr__(self) -> str:
        return f"CompositeArtifactRepository({list(self.members)!r})"


def merge_metadata_repositories(repositories: Sequence[MetadataRepository]) -> MetadataRepository:
    """Return the single repository itself, or a composite over all of them."""
    if len(repositories) == 1:
        return repositories[0]
    return CompositeMetadataRepository(repositories)


def merge_artifact_repositories(repositories: Sequence[ArtifactRepository]) -> ArtifactRepository:
    """Return the single repository itself, or a composite over all of them."""
    if len(repositories) == 1:
        return repositories[0]
    return CompositeArtifactRepository(repositories)
