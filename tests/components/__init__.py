"""Tests for the standard components."""
