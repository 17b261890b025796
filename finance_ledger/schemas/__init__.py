"""Pydantic schemas for the ledger API and service inputs."""
