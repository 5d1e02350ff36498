"""Reconcile internal transaction records against a provider statement."""

__version__ = "0.1.0"
