"""Aixo presentation adapter package.

Architectural role:
- Defines the external interaction boundary: template snippet entry point,
  operator dashboards, HTTP API, and interactive CLI.
- Performs input shaping and output formatting only; generation is delegated
  to `aixo.core.dispatcher`.
"""
