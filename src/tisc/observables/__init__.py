"""Observables of converged momentum points."""
from .extract import ObservableResults, extract

__all__ = ["ObservableResults", "extract"]
