"""
git-history loads a git repository's commit graph into memory.

The loader module holds the entry points; domain holds the value types
they return.
"""
