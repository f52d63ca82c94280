"""Tests for mintdb."""
