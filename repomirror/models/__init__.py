"""Pydantic models shared by the locator, resolver, executor and runner."""
