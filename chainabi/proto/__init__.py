"""Wire primitives, error kinds and type descriptors."""
