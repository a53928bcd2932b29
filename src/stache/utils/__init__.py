"""Shared utilities for stache."""
