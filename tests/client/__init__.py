"""Tests for the serving clients."""
