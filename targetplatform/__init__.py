"""
Target platform resolution.

Resolves target definitions (named repository locations) into one merged
metadata view and one lazily materialized artifact view.
"""
