"""Pydantic models describing API payloads."""
