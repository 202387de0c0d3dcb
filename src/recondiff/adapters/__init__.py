"""Adapters translating external documents into domain objects."""
