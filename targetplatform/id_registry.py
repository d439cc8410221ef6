"""
Symbolic repository id registry.

Maps the id a target definition gives a location (or a reference nickname)
to the location URI. Resolution only ever writes to it best-effort.
"""
import threading
from typing import Dict, List, Optional


class RepositoryIdRegistry:
    """Abstract base for repository id registries."""
    
    def add_mapping(self, repository_id: Optional[str], location: str) -> None:
        """Record that repository_id refers to location."""
        raise NotImplementedError


class NullIdRegistry(RepositoryIdRegistry):
    """Registry that discards every mapping."""
    
    def add_mapping(self, repository_id: Optional[str], location: str) -> None:
        return None


class InMemoryIdRegistry(RepositoryIdRegistry):
    """Thread-safe in-memory registry, shareable across resolutions."""
    
    def __init__(self):
        self._mappings: Dict[str, List[str]] = {}
        self._lock = threading.Lock()
    
    def add_mapping(self, repository_id: Optional[str], location: str) -> None:
        if not repository_id:
            return
        with self._lock:
            locations = self._mappings.setdefault(repository_id, [])
            if location not in locations:
                locations.append(location)
    
    def get_locations(self, repository_id: str) -> List[str]:
        with self._lock:
            return list(self._mappings.get(repository_id, []))
    
    def get_ids(self, location: str) -> List[str]:
        with self._lock:
            return [repo_id for repo_id, locations in self._mappings.items() if location in locations]
