"""
Pytest configuration for unit tests.

Provides in-memory repository managers that record every load.
"""
import pytest

from targetplatform.agent import ProvisioningAgent
from targetplatform.errors import ProvisionError
from targetplatform.repository.base import ArtifactRepositoryManager, MetadataRepositoryManager
from targetplatform.repository.schema import ArtifactDescriptor, ArtifactKey, InstallableUnit
from targetplatform.repository.simple import SimpleArtifactRepository, SimpleMetadataRepository


class RecordingMetadataManager(MetadataRepositoryManager):
    """Serves metadata repositories from a dict and records each load."""
    
    def __init__(self):
        self.repositories = {}
        self.failing = set()
        self.loads = []
    
    def add(self, location, unit_ids=(), references=()):
        units = [InstallableUnit(id=unit_id, version="1.0.0") for unit_id in unit_ids]
        repository = SimpleMetadataRepository(location, units, list(references), name=location)
        self.repositories[location] = repository
        return repository
    
    def load_repository(self, location, monitor=None):
        self.loads.append(location)
        if location in self.failing:
            raise ProvisionError(f"Connection refused: {location}")
        if location not in self.repositories:
            raise ProvisionError(f"No repository found at {location}")
        return self.repositories[location]


class RecordingArtifactManager(ArtifactRepositoryManager):
    """Serves artifact repositories from a dict and records each load."""
    
    def __init__(self):
        self.repositories = {}
        self.loads = []
    
    def add(self, location, artifact_ids=()):
        descriptors = [
            ArtifactDescriptor(key=ArtifactKey(id=artifact_id, version="1.0.0"), path=f"plugins/{artifact_id}.jar")
            for artifact_id in artifact_ids
        ]
        repository = SimpleArtifactRepository(location, descriptors)
        self.repositories[location] = repository
        return repository
    
    def load_repository(self, location, monitor=None):
        self.loads.append(location)
        if location not in self.repositories:
            raise ProvisionError(f"No artifact repository found at {location}")
        return self.repositories[location]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep resolver configuration independent of the caller's environment."""
    for name in (
        "TARGETPLATFORM_REFERENCED_REPOSITORIES",
        "TARGETPLATFORM_HTTP_TIMEOUT",
        "TARGETPLATFORM_CACHE_FAILURES",
        "TARGETPLATFORM_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def metadata_manager():
    return RecordingMetadataManager()


@pytest.fixture
def artifact_manager():
    return RecordingArtifactManager()


@pytest.fixture
def agent(metadata_manager, artifact_manager):
    return ProvisioningAgent(metadata_manager=metadata_manager, artifact_manager=artifact_manager)
