"""Infrastructure layer: catalog tree I/O, repositories, templates.

Depends on stdlib, the domain layer, and third-party libs (Jinja2).
It must never import from services, commands, or output.
"""
