"""Puts the repository root on sys.path so `alphagrid` imports without an install."""
