"""Shared helpers with no app dependencies."""
