"""Adapters wrapping third-party parsing and highlighting libraries."""
