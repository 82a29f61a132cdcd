"""Type registry for the GitLab provider."""

from glprovider.data_sources import GroupHooksDataSource, ProjectBranchesDataSource
from glprovider.registry.resource_registry import ResourceRegistry
from glprovider.resources import (
    DeployKeyResource,
    DeployTokenResource,
    GroupLabelResource,
    GroupLdapLinkResource,
    GroupVariableResource,
    PipelineScheduleResource,
    PipelineScheduleVariableResource,
    PipelineTriggerResource,
    ProjectAccessTokenResource,
    ProjectFreezePeriodResource,
    ProjectHookResource,
    ProjectLabelResource,
    ProjectLevelMrApprovalsResource,
    ProjectMembershipResource,
    ProjectShareGroupResource,
    ProjectVariableResource,
    TagProtectionResource,
)

RESOURCES = (
    DeployKeyResource,
    DeployTokenResource,
    GroupLabelResource,
    GroupLdapLinkResource,
    GroupVariableResource,
    PipelineScheduleResource,
    PipelineScheduleVariableResource,
    PipelineTriggerResource,
    ProjectAccessTokenResource,
    ProjectFreezePeriodResource,
    ProjectHookResource,
    ProjectLabelResource,
    ProjectLevelMrApprovalsResource,
    ProjectMembershipResource,
    ProjectShareGroupResource,
    ProjectVariableResource,
    TagProtectionResource,
)

DATA_SOURCES = (GroupHooksDataSource, ProjectBranchesDataSource)


def default_registry() -> ResourceRegistry:
    """Registry of every type this provider ships."""
    return ResourceRegistry(RESOURCES, DATA_SOURCES)


__all__ = ["DATA_SOURCES", "RESOURCES", "ResourceRegistry", "default_registry"]
