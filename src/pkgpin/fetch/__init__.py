"""Package fetching: ref resolution, git materialization and pinning."""
from pkgpin.fetch.command import FetchCommand, default_destination
from pkgpin.fetch.git import GitClient
from pkgpin.fetch.reconcile import upsert_pkgfile
from pkgpin.fetch.reference import Materialization, RepoReference
from pkgpin.fetch.resolver import candidate_refs

__all__ = [
    "FetchCommand",
    "GitClient",
    "Materialization",
    "RepoReference",
    "candidate_refs",
    "default_destination",
    "upsert_pkgfile",
]
