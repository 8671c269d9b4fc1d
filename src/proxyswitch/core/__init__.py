"""Shared plumbing: configuration, exceptions and logging setup."""
