"""
Target definition loader for target platform resolution.

Handles loading target YAML definitions that list the repository locations
a build resolves its dependencies against, and aggregates their content.
"""
import logging
import yaml
from pathlib import Path
from typing import List, Optional
from dataclasses import dataclass, field

from targetplatform.agent import ProvisioningAgent
from targetplatform.config import ReferencedRepositoryMode, ResolverConfig, get_config
from targetplatform.repository.base import ArtifactRepository, MetadataRepository, UnitPredicate
from targetplatform.repository.composite import merge_artifact_repositories, merge_metadata_repositories
from targetplatform.repository.schema import InstallableUnit
from targetplatform.progress import SubMonitor
from targetplatform.resolver.content import UriTargetContent

logger = logging.getLogger(__name__)


@dataclass
class TargetLocation:
    """One repository location of a target definition."""
    uri: str
    id: Optional[str] = None
    referenced_mode: Optional[ReferencedRepositoryMode] = None


@dataclass
class TargetDefinition:
    """Represents a target definition."""
    name: str
    locations: List[TargetLocation] = field(default_factory=list)
    
    @classmethod
    def from_yaml(cls, yaml_path: Path) -> 'TargetDefinition':
        """
        Load target definition from YAML file.
        
        Args:
            yaml_path: Path to target definition YAML file
            
        Returns:
            TargetDefinition instance
            
        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ValueError: If required fields are missing or invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Target definition not found: {yaml_path}")
        
        with open(yaml_path, 'r') as f:
            data = yaml.safe_load(f)
        
        if not isinstance(data, dict):
            raise ValueError(f"Invalid target definition in {yaml_path}: expected mapping")
        
        missing_fields = [name for name in ('name', 'locations') if name not in data]
        if missing_fields:
            raise ValueError(f"Missing required fields in {yaml_path}: {', '.join(missing_fields)}")
        
        if not isinstance(data['locations'], list):
            raise ValueError(
                f"Invalid target definition in {yaml_path}: "
                f"'locations' must be a list, got {type(data['locations']).__name__}"
            )
        
        locations = []
        for i, entry in enumerate(data['locations']):
            if not isinstance(entry, dict) or 'uri' not in entry:
                raise ValueError(f"Invalid location at index {i} in {yaml_path}: missing 'uri' field")
            
            mode = entry.get('referenced_repositories')
            if mode is not None:
                try:
                    mode = ReferencedRepositoryMode(str(mode).lower())
                except ValueError:
                    raise ValueError(
                        f"Invalid location at index {i} in {yaml_path}: "
                        f"referenced_repositories must be include or ignore, got {mode}"
                    )
            
            locations.append(TargetLocation(uri=str(entry['uri']), id=entry.get('id'), referenced_mode=mode))
        
        return cls(name=data['name'], locations=locations)


class TargetPlatform:
    """
    Aggregate content of all locations of a target definition.
    
    Each location resolves independently and at most once; views merge the
    locations in declaration order.
    """
    
    def __init__(self, definition: TargetDefinition, agent: ProvisioningAgent,
                 config: Optional[ResolverConfig] = None):
        if config is None:
            config = get_config()
        
        self.definition = definition
        self.agent = agent
        self.contents = [
            UriTargetContent(
                agent,
                location.uri,
                repository_id=location.id,
                referenced_mode=location.referenced_mode or config.referenced_mode,
                cache_failures=config.cache_failures
            )
            for location in definition.locations
        ]
    
    def resolve(self, monitor=None) -> None:
        """Resolve every location, stopping at the first failure."""
        sub_monitor = SubMonitor.convert(monitor, max(len(self.contents), 1))
        for content in self.contents:
            content.ensure_resolved(sub_monitor.split(1))
        sub_monitor.done()
        logger.info(f"Resolved target definition {self.definition.name} ({len(self.contents)} locations)")
    
    def query(self, predicate: UnitPredicate, monitor=None) -> List[InstallableUnit]:
        sub_monitor = SubMonitor.convert(monitor, max(len(self.contents), 1))
        results: List[InstallableUnit] = []
        for content in self.contents:
            results.extend(content.query(predicate, sub_monitor.split(1)))
        sub_monitor.done()
        return results
    
    @property
    def metadata_repository(self) -> MetadataRepository:
        return merge_metadata_repositories([content.metadata_repository for content in self.contents])
    
    @property
    def artifact_repository(self) -> ArtifactRepository:
        return merge_artifact_repositories([content.artifact_repository for content in self.contents])
