"""Generative AI flows."""
