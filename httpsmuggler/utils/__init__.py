"""Logging and TLS helpers shared by the client, detectors and CLI."""
