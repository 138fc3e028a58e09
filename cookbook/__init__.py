"""Cookbook: recipe storage, reference-data ingestion and JSON API."""

__version__ = "0.1.0"
