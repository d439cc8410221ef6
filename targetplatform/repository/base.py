"""
Repository model and interfaces.

Defines locations, repository references, the metadata/artifact repository
interfaces and the managers (loading services) that produce them.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional
from urllib.parse import urlsplit, urlunsplit

from targetplatform.repository.schema import ArtifactDescriptor, ArtifactKey, InstallableUnit

# Reference option bits
NONE = 0
ENABLED = 1

UnitPredicate = Callable[[InstallableUnit], bool]
ArtifactPredicate = Callable[[ArtifactDescriptor], bool]


def normalize_location(location: str) -> str:
    """
    Canonicalize a repository location for use as a dedup key.

    Lowercases scheme and host, collapses '.', '..' and empty path segments
    and drops the trailing slash, so 'HTTP://Example.org/a/./b/' and
    'http://example.org/a/b' compare equal. Absolute filesystem paths map
    to their file:// form.
    """
    location = location.strip()
    if not urlsplit(location).scheme and location.startswith(('/', '~')):
        location = Path(location).expanduser().as_uri()

    parts = urlsplit(location)
    scheme = parts.scheme.lower()

    netloc = parts.netloc
    if '@' in netloc:
        userinfo, host = netloc.rsplit('@', 1)
        netloc = f"{userinfo}@{host.lower()}"
    else:
        netloc = netloc.lower()

    path = parts.path
    absolute = path.startswith('/')
    segments: List[str] = []
    for segment in path.split('/'):
        if segment in ('', '.'):
            continue
        if segment == '..':
            if segments and segments[-1] != '..':
                segments.pop()
            elif not absolute:
                segments.append(segment)
            continue
        segments.append(segment)
    path = '/'.join(segments)
    if absolute:
        path = '/' + path
    if netloc and path == '/':
        path = ''

    return urlunsplit((scheme, netloc, path, parts.query, parts.fragment))


class RepositoryKind(str, Enum):
    """Kind of repository a reference points to."""
    METADATA = "metadata"
    ARTIFACT = "artifact"


@dataclass(frozen=True)
class Reference:
    """Pointer from a loaded repository to another repository location."""
    location: str
    kind: RepositoryKind
    options: int = ENABLED
    nickname: Optional[str] = None

    def __post_init__(self):
        # Managers may hand in the plain string value
        object.__setattr__(self, 'kind', RepositoryKind(self.kind))

    @property
    def is_enabled(self) -> bool:
        return (self.options & ENABLED) != 0


class MetadataRepository(ABC):
    """A loaded repository of installable units."""

    @property
    @abstractmethod
    def location(self) -> str:
        pass

    @property
    def name(self) -> Optional[str]:
        return None

    @property
    @abstractmethod
    def references(self) -> List[Reference]:
        """References declared by this repository, in declaration order."""
        pass

    @abstractmethod
    def query(self, predicate: UnitPredicate, monitor=None) -> List[InstallableUnit]:
        """
        Return the units matching predicate.

        Args:
            predicate: Callable returning True for units to include
            monitor: Optional progress monitor

        Returns:
            Matching units in repository order
        """
        pass


class ArtifactRepository(ABC):
    """A loaded repository of binary artifacts."""

    @property
    @abstractmethod
    def location(self) -> str:
        pass

    @abstractmethod
    def query(self, predicate: ArtifactPredicate, monitor=None) -> List[ArtifactDescriptor]:
        """Return the artifact descriptors matching predicate."""
        pass

    def get_artifact_descriptors(self, key: ArtifactKey) -> List[ArtifactDescriptor]:
        """Return all descriptors stored for key."""
        return self.query(lambda descriptor: descriptor.key == key)

    def contains(self, key: ArtifactKey) -> bool:
        return bool(self.get_artifact_descriptors(key))


class MetadataRepositoryManager(ABC):
    """Loading service for metadata repositories."""

    @abstractmethod
    def load_repository(self, location: str, monitor=None) -> MetadataRepository:
        """
        Load the metadata repository at location.

        Raises:
            ProvisionError: If the repository cannot be fetched or parsed
        """
        pass


class ArtifactRepositoryManager(ABC):
    """Loading service for artifact repositories."""

    @abstractmethod
    def load_repository(self, location: str, monitor=None) -> ArtifactRepository:
        """
        Load the artifact repository at location.

        Raises:
            ProvisionError: If the repository cannot be fetched or parsed
        """
        pass
