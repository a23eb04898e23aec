"""App Registry -- lookup and bulk import of named, typed application artifacts."""

__version__ = "0.1.0"
