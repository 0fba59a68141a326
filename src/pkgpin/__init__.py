"""pkgpin - fetch configuration packages from git and pin their upstream."""

__version__ = "0.1.0"
