"""Sandboxed GraphQL subgraph composition with serializable results."""
