#!/usr/bin/env python3
"""
tpctl - target platform resolution CLI

Resolve target definitions and list the units and artifacts they provide.
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from targetplatform.agent import create_agent
from targetplatform.config import get_config
from targetplatform.errors import TargetDefinitionResolutionError
from targetplatform.id_registry import InMemoryIdRegistry
from targetplatform.progress import ProgressMonitor
from targetplatform.target_definition import TargetDefinition, TargetPlatform


class TargetPlatformCLI:
    """Prints resolution results for one target definition."""
    
    def __init__(self, platform: TargetPlatform):
        self.platform = platform
    
    def resolve(self) -> None:
        """Resolve all locations and print per-location summaries."""
        self.platform.resolve(ProgressMonitor())
        
        print(f"Target: {self.platform.definition.name}")
        print("=" * 60)
        for content in self.platform.contents:
            resolved = content.ensure_resolved()
            units = resolved.metadata_repository.query(lambda unit: True)
            print(f"{content.location}")
            print(f"  Metadata repositories: {len(resolved.metadata_repositories)}")
            for repository in resolved.metadata_repositories:
                print(f"    {repository.location}")
            print(f"  Artifact repositories: {len(resolved.artifact_repositories)}")
            for repository in resolved.artifact_repositories:
                print(f"    {repository.location}")
            print(f"  Units: {len(units)}")
    
    def units(self, id_prefix: Optional[str] = None) -> None:
        """List units, optionally filtered by id prefix."""
        units = self.platform.query(lambda unit: id_prefix is None or unit.id.startswith(id_prefix))
        if not units:
            print("No units found.")
            return
        for unit in units:
            print(f"{unit.id} {unit.version}")
    
    def artifacts(self, id_prefix: Optional[str] = None) -> None:
        """List artifact keys, optionally filtered by id prefix."""
        descriptors = self.platform.artifact_repository.query(
            lambda descriptor: id_prefix is None or descriptor.key.id.startswith(id_prefix)
        )
        if not descriptors:
            print("No artifacts found.")
            return
        for descriptor in descriptors:
            print(f"{descriptor.key}  {descriptor.path or ''}".rstrip())


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='Target platform resolution CLI',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    
    subparsers = parser.add_subparsers(dest='command', help='Command to execute')
    
    # resolve
    resolve_parser = subparsers.add_parser('resolve', help='Resolve a target definition and summarize it')
    resolve_parser.add_argument('target', help='Path to target definition YAML')
    
    # units
    units_parser = subparsers.add_parser('units', help='List installable units')
    units_parser.add_argument('target', help='Path to target definition YAML')
    units_parser.add_argument('--id', dest='id_prefix', help='Only units whose id starts with this prefix')
    
    # artifacts
    artifacts_parser = subparsers.add_parser('artifacts', help='List artifacts')
    artifacts_parser.add_argument('target', help='Path to target definition YAML')
    artifacts_parser.add_argument('--id', dest='id_prefix', help='Only artifacts whose id starts with this prefix')
    
    args = parser.parse_args(argv)
    
    if not args.command:
        parser.print_help()
        sys.exit(1)
    
    try:
        config = get_config()
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )
    
    try:
        definition = TargetDefinition.from_yaml(Path(args.target))
        platform = TargetPlatform(definition, create_agent(config, id_registry=InMemoryIdRegistry()), config)
        cli = TargetPlatformCLI(platform)
        
        if args.command == 'resolve':
            cli.resolve()
        elif args.command == 'units':
            cli.units(id_prefix=args.id_prefix)
        elif args.command == 'artifacts':
            cli.artifacts(id_prefix=args.id_prefix)
        else:
            parser.print_help()
            sys.exit(1)
    except TargetDefinitionResolutionError as e:
        print(f"Resolution Error: {e}", file=sys.stderr)
        sys.exit(1)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
