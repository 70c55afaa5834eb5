"""Shared helpers: time handling and HTTP response envelopes."""
