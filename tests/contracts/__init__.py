"""Tests for contracts package.

Covers the error taxonomy, ObjectDescriptor, and that every backend honors
the Backend/BackendHandle/ObjectWriter protocols.
"""
