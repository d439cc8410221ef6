"""
Resolution of repository locations into merged repository views.

- walker: recursive reference traversal for one resolution pass
- single_flight: resolve-once cell shared by concurrent callers
- content: per-location resolution orchestrator
"""
