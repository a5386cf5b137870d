"""Declarative workflow definitions."""

from flowrun.recipes.loader import load_workflow, load_workflow_text

__all__ = ["load_workflow", "load_workflow_text"]
