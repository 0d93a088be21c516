"""Tests for the kn-local command line tool."""
