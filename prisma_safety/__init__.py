"""Backward-compatibility gate for Prisma schema changes."""

__version__ = "0.1.0"
