"""Core utilities shared across Codegen Cloner modules."""
