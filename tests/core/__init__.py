"""Tests for the core infrastructure package."""
