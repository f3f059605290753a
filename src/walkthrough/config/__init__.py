"""Configuration constants for the walkthrough package."""
