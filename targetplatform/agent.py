"""
Provisioning agent.

Holds the collaborator services resolution depends on: the metadata and
artifact repository managers and the repository id registry.
"""
from typing import Optional

from targetplatform.config import ResolverConfig, get_config
from targetplatform.id_registry import NullIdRegistry, RepositoryIdRegistry
from targetplatform.repository.base import ArtifactRepositoryManager, MetadataRepositoryManager
from targetplatform.repository.simple import (
    RepositoryTransport,
    SimpleArtifactRepositoryManager,
    SimpleMetadataRepositoryManager,
)


class ProvisioningAgent:
    """Container for the repository loading services."""

    def __init__(
        self,
        metadata_manager: Optional[MetadataRepositoryManager] = None,
        artifact_manager: Optional[ArtifactRepositoryManager] = None,
        id_registry: Optional[RepositoryIdRegistry] = None
    ):
        """
        Initialize agent.

        Args:
            metadata_manager: Loading service for metadata repositories
            artifact_manager: Loading service for artifact repositories
            id_registry: Repository id registry (default: discards mappings)
        """
        self.metadata_manager = metadata_manager
        self.artifact_manager = artifact_manager
        self.id_registry = id_registry if id_registry is not None else NullIdRegistry()


def create_agent(config: Optional[ResolverConfig] = None,
                 id_registry: Optional[RepositoryIdRegistry] = None) -> ProvisioningAgent:
    """
    Create an agent loading simple YAML repositories.

    Args:
        config: Resolver configuration (default: from environment)
        id_registry: Repository id registry to record mappings in

    Returns:
        ProvisioningAgent sharing one transport between both managers
    """
    if config is None:
        config = get_config()

    transport = RepositoryTransport(timeout=config.http_timeout)
    return ProvisioningAgent(
        metadata_manager=SimpleMetadataRepositoryManager(transport),
        artifact_manager=SimpleArtifactRepositoryManager(transport),
        id_registry=id_registry
    )
