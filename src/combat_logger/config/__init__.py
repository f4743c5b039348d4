"""Packaged default configuration (``default_settings.yaml``)."""
