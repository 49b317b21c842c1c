"""Service layer: catalog operations returning ServiceResult.

Services reach the file tree only through a Catalog and its repositories.
They must never import from commands or output.
"""
