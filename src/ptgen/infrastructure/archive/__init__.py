from .static_archive import StaticArchive

__all__ = ["StaticArchive"]
