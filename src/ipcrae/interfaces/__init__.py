"""Interfaces exposing the vault operations (host plugin, CLI)."""
