"""Codegen Cloner - clone pull requests and stream their setup commands."""
