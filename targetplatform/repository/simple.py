"""
Simple YAML repositories.

A repository root holds content.yaml (units and references) and/or
artifacts.yaml (artifact descriptors). Roots are read from the filesystem
(file:// or plain paths) or over HTTP(S).
"""
import logging
from pathlib import Path
from typing import List, Optional
from urllib.parse import unquote, urljoin, urlsplit

import requests
import yaml
from pydantic import ValidationError

from targetplatform.errors import ProvisionError
from targetplatform.repository.base import (
    ENABLED,
    NONE,
    ArtifactPredicate,
    ArtifactRepository,
    ArtifactRepositoryManager,
    MetadataRepository,
    MetadataRepositoryManager,
    Reference,
    RepositoryKind,
    UnitPredicate,
)
from targetplatform.repository.schema import (
    ArtifactDescriptor,
    ArtifactsDocument,
    ContentDocument,
    InstallableUnit,
    ReferenceEntry,
)

logger = logging.getLogger(__name__)

CONTENT_FILE = "content.yaml"
ARTIFACTS_FILE = "artifacts.yaml"


class RepositoryTransport:
    """Reads repository files from file:// and http(s):// locations."""

    def __init__(self, timeout: float = 30.0, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def read(self, location: str, filename: str) -> bytes:
        """
        Read filename below the repository root at location.

        Raises:
            ProvisionError: If the file is missing or cannot be fetched
        """
        scheme = urlsplit(location).scheme.lower()

        if scheme in ('http', 'https'):
            url = f"{location.rstrip('/')}/{filename}"
            try:
                response = self.session.get(url, timeout=self.timeout)
                response.raise_for_status()
            except requests.exceptions.RequestException as e:
                raise ProvisionError(f"Could not fetch {url}: {e}") from e
            return response.content

        if scheme in ('file', ''):
            path = _file_path(location) / filename
            if not path.exists():
                raise ProvisionError(f"No repository found at {location} ({filename} missing)")
            try:
                return path.read_bytes()
            except OSError as e:
                raise ProvisionError(f"Could not read {path}: {e}") from e

        raise ProvisionError(f"Unsupported repository location scheme '{scheme}': {location}")


def _file_path(location: str) -> Path:
    parts = urlsplit(location)
    if parts.scheme.lower() == 'file':
        return Path(unquote(parts.path))
    return Path(location).expanduser()


def _parse_yaml(data: bytes, location: str, filename: str) -> dict:
    try:
        document = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise ProvisionError(f"Invalid YAML in {filename} at {location}: {e}") from e

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ProvisionError(
            f"Invalid {filename} at {location}: expected mapping, got {type(document).__name__}"
        )
    bad_keys = [key for key in document if not isinstance(key, str)]
    if bad_keys:
        raise ProvisionError(f"Invalid {filename} at {location}: non-string keys {bad_keys!r}")
    return document


def _resolve_reference_location(base: str, reference_location: str) -> str:
    """Resolve a relative reference location against the declaring repository."""
    if urlsplit(reference_location).scheme:
        return reference_location
    if not urlsplit(base).scheme:
        return str((Path(base).expanduser() / reference_location).resolve())
    return urljoin(base.rstrip('/') + '/', reference_location)


def _to_reference(base: str, entry: ReferenceEntry) -> Reference:
    if entry.options is not None:
        options = entry.options
    elif entry.enabled is False:
        options = NONE
    else:
        options = ENABLED

    return Reference(
        location=_resolve_reference_location(base, entry.location),
        kind=RepositoryKind(entry.type),
        options=options,
        nickname=entry.nickname,
    )


class SimpleMetadataRepository(MetadataRepository):
    """In-memory metadata repository built from a content.yaml document."""

    def __init__(self, location: str, units: List[InstallableUnit], references: List[Reference] = None,
                 name: Optional[str] = None):
        self._location = location
        self._units = list(units)
        self._references = list(references or [])
        self._name = name

    @property
    def location(self) -> str:
        return self._location

    @property
    def name(self) -> Optional[str]:
        return self._name

    @property
    def references(self) -> List[Reference]:
        return list(self._references)

    def query(self, predicate: UnitPredicate, monitor=None) -> List[InstallableUnit]:
        return [unit for unit in self._units if predicate(unit)]

    def __repr__(self) -> str:
        return f"SimpleMetadataRepository({self._location!r}, units={len(self._units)})"


class SimpleArtifactRepository(ArtifactRepository):
    """In-memory artifact repository built from an artifacts.yaml document."""

    def __init__(self, location: str, descriptors: List[ArtifactDescriptor], name: Optional[str] = None):
        self._location = location
        self._descriptors = list(descriptors)
        self.name = name

    @property
    def location(self) -> str:
        return self._location

    def query(self, predicate: ArtifactPredicate, monitor=None) -> List[ArtifactDescriptor]:
        return [descriptor for descriptor in self._descriptors if predicate(descriptor)]

    def __repr__(self) -> str:
        return f"SimpleArtifactRepository({self._location!r}, artifacts={len(self._descriptors)})"


class SimpleMetadataRepositoryManager(MetadataRepositoryManager):
    """Loads content.yaml metadata repositories through a RepositoryTransport."""

    def __init__(self, transport: Optional[RepositoryTransport] = None):
        self.transport = transport or RepositoryTransport()

    def load_repository(self, location: str, monitor=None) -> SimpleMetadataRepository:
        """
        Load content.yaml from location.

        Raises:
            ProvisionError: If the document is missing, unreadable or invalid
        """
        logger.debug(f"Loading metadata repository {location}")
        data = _parse_yaml(self.transport.read(location, CONTENT_FILE), location, CONTENT_FILE)
        try:
            document = ContentDocument.model_validate(data)
        except ValidationError as e:
            raise ProvisionError(f"Invalid {CONTENT_FILE} at {location}: {e}") from e

        references = [_to_reference(location, entry) for entry in document.references]
        return SimpleMetadataRepository(location, document.units, references, name=document.name)


class SimpleArtifactRepositoryManager(ArtifactRepositoryManager):
    """Loads artifacts.yaml artifact repositories through a RepositoryTransport."""

    def __init__(self, transport: Optional[RepositoryTransport] = None):
        self.transport = transport or RepositoryTransport()

    def load_repository(self, location: str, monitor=None) -> SimpleArtifactRepository:
        """
        Load artifacts.yaml from location.

        Raises:
            ProvisionError: If the document is missing, unreadable or invalid
        """
        logger.debug(f"Loading artifact repository {location}")
        data = _parse_yaml(self.transport.read(location, ARTIFACTS_FILE), location, ARTIFACTS_FILE)
        try:
            document = ArtifactsDocument.model_validate(data)
        except ValidationError as e:
            raise ProvisionError(f"Invalid {ARTIFACTS_FILE} at {location}: {e}") from e

        descriptors = [entry.to_descriptor() for entry in document.artifacts]
        return SimpleArtifactRepository(location, descriptors, name=document.name)
