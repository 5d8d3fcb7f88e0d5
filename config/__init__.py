"""Configuration loading for the climate controller."""
