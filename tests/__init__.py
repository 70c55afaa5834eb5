"""Test suite for the plant care scheduler."""
