"""Read-only GitLab lookups."""

from glprovider.data_sources.group_hooks import GroupHooksDataSource
from glprovider.data_sources.project_branches import ProjectBranchesDataSource

__all__ = ["GroupHooksDataSource", "ProjectBranchesDataSource"]
