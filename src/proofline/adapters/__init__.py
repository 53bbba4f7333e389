"""Adapters for the LanguageTool service and plain-text documents."""
