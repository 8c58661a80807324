"""Domain layer — status model, cycles, task lines, and lifecycle dates.

This layer depends only on stdlib and pydantic.
It must never import from editor, pipeline, services, commands, or config.
"""
