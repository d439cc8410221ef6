"""
Unit tests for target definition loading and aggregation.
"""
import pytest
import yaml

from targetplatform.config import ReferencedRepositoryMode, get_config
from targetplatform.errors import RepositoryLoadError
from targetplatform.repository.base import ENABLED, Reference, RepositoryKind
from targetplatform.repository.composite import CompositeMetadataRepository
from targetplatform.target_definition import TargetDefinition, TargetLocation, TargetPlatform


class TestTargetDefinitionLoading:
    """Test loading target definition YAML."""
    
    def write(self, tmp_path, data):
        target_file = tmp_path / "target.yaml"
        with open(target_file, 'w') as f:
            yaml.dump(data, f)
        return target_file
    
    def test_load_definition(self, tmp_path):
        target_file = self.write(tmp_path, {
            'name': 'my-target',
            'locations': [
                {'id': 'releases', 'uri': 'https://example.org/releases', 'referenced_repositories': 'IGNORE'},
                {'uri': 'https://example.org/updates'},
            ]
        })
        
        definition = TargetDefinition.from_yaml(target_file)
        
        assert definition.name == 'my-target'
        assert definition.locations[0] == TargetLocation(
            uri='https://example.org/releases', id='releases', referenced_mode=ReferencedRepositoryMode.IGNORE
        )
        assert definition.locations[1].id is None
        assert definition.locations[1].referenced_mode is None
    
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError) as exc_info:
            TargetDefinition.from_yaml(tmp_path / "missing.yaml")
        
        assert 'Target definition not found' in str(exc_info.value)
    
    def test_missing_required_fields(self, tmp_path):
        target_file = self.write(tmp_path, {'name': 'my-target'})
        
        with pytest.raises(ValueError) as exc_info:
            TargetDefinition.from_yaml(target_file)
        
        assert 'locations' in str(exc_info.value)
    
    def test_location_without_uri(self, tmp_path):
        target_file = self.write(tmp_path, {'name': 't', 'locations': [{'id': 'x'}]})
        
        with pytest.raises(ValueError) as exc_info:
            TargetDefinition.from_yaml(target_file)
        
        assert "index 0" in str(exc_info.value)
    
    def test_invalid_referenced_mode(self, tmp_path):
        target_file = self.write(tmp_path, {
            'name': 't',
            'locations': [{'uri': 'https://example.org/r', 'referenced_repositories': 'sometimes'}]
        })
        
        with pytest.raises(ValueError):
            TargetDefinition.from_yaml(target_file)
    
    def test_locations_must_be_list(self, tmp_path):
        target_file = self.write(tmp_path, {'name': 't', 'locations': 'https://example.org/r'})
        
        with pytest.raises(ValueError):
            TargetDefinition.from_yaml(target_file)


class TestTargetPlatform:
    """Test aggregation across target locations."""
    
    def test_locations_merged_in_order(self, agent, metadata_manager):
        metadata_manager.add("repo://one", ["one.unit"])
        metadata_manager.add("repo://two", ["two.unit"])
        definition = TargetDefinition('t', [TargetLocation("repo://one", "one"), TargetLocation("repo://two", "two")])
        platform = TargetPlatform(definition, agent, get_config())
        
        platform.resolve()
        
        assert [unit.id for unit in platform.query(lambda unit: True)] == ["one.unit", "two.unit"]
        assert isinstance(platform.metadata_repository, CompositeMetadataRepository)
        assert metadata_manager.loads == ["repo://one", "repo://two"]
    
    def test_single_location_unwrapped(self, agent, metadata_manager):
        root = metadata_manager.add("repo://one", ["one.unit"])
        platform = TargetPlatform(TargetDefinition('t', [TargetLocation("repo://one")]), agent, get_config())
        
        assert platform.metadata_repository is root
    
    def test_default_mode_from_config(self, agent, metadata_manager, monkeypatch):
        monkeypatch.setenv("TARGETPLATFORM_REFERENCED_REPOSITORIES", "ignore")
        metadata_manager.add("repo://one", references=[Reference("repo://two", RepositoryKind.METADATA, ENABLED)])
        definition = TargetDefinition('t', [
            TargetLocation("repo://one"),
        ])
        platform = TargetPlatform(definition, agent)
        
        platform.resolve()
        
        assert metadata_manager.loads == ["repo://one"]
    
    def test_location_mode_overrides_config(self, agent, metadata_manager):
        metadata_manager.add("repo://one", references=[Reference("repo://two", RepositoryKind.METADATA, ENABLED)])
        metadata_manager.add("repo://two")
        definition = TargetDefinition('t', [
            TargetLocation("repo://one", referenced_mode=ReferencedRepositoryMode.IGNORE),
        ])
        platform = TargetPlatform(definition, agent, get_config())
        
        platform.resolve()
        
        assert metadata_manager.loads == ["repo://one"]
    
    def test_failing_location_reported(self, agent, metadata_manager):
        metadata_manager.add("repo://one")
        definition = TargetDefinition('t', [TargetLocation("repo://one"), TargetLocation("repo://missing")])
        platform = TargetPlatform(definition, agent, get_config())
        
        with pytest.raises(RepositoryLoadError) as exc_info:
            platform.resolve()
        
        assert exc_info.value.location == "repo://missing"
        assert platform.contents[0].is_resolved is True
