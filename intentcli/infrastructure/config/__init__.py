"""Configuration loading and typed accessors."""
