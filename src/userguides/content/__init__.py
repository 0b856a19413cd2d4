"""Bundled guide content; declarations live under ``guides/``."""
