"""Ambient plumbing: configuration, errors, logging, clock, CLI."""
