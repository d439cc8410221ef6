"""
Repository model and implementations.

- base: locations, references and the repository/manager interfaces
- simple: YAML repositories read over file:// or http(s)://
- lazy: deferred artifact repositories
- composite: merged views over several repositories
"""
