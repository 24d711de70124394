"""Deploybot: deployment orchestration behind source-control webhooks."""

__version__ = "0.1.0"
