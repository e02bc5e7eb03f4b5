"""Diagram library: persistent stores plus backup, file, and share-link exchange."""
