"""Producers of candidate issues and target repositories."""
