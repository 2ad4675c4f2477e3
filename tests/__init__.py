"""Tema test suite."""
