"""Test doubles for the classifier and feature extractor ports."""
