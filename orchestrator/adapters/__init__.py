"""Adapters: agent HTTP client, storage, device registry, web API."""
