"""Managed GitLab resource types."""

from glprovider.resources.base import DataSource, Resource
from glprovider.resources.deploy_key import DeployKeyResource
from glprovider.resources.deploy_token import DeployTokenResource
from glprovider.resources.group_ldap_link import GroupLdapLinkResource
from glprovider.resources.labels import GroupLabelResource, ProjectLabelResource
from glprovider.resources.pipeline_schedule import (
    PipelineScheduleResource,
    PipelineScheduleVariableResource,
)
from glprovider.resources.pipeline_trigger import PipelineTriggerResource
from glprovider.resources.project_access_token import ProjectAccessTokenResource
from glprovider.resources.project_freeze_period import ProjectFreezePeriodResource
from glprovider.resources.project_hook import ProjectHookResource
from glprovider.resources.project_level_mr_approvals import ProjectLevelMrApprovalsResource
from glprovider.resources.project_membership import ProjectMembershipResource
from glprovider.resources.project_share_group import ProjectShareGroupResource
from glprovider.resources.tag_protection import TagProtectionResource
from glprovider.resources.variables import GroupVariableResource, ProjectVariableResource

__all__ = [
    "DataSource",
    "DeployKeyResource",
    "DeployTokenResource",
    "GroupLabelResource",
    "GroupLdapLinkResource",
    "GroupVariableResource",
    "PipelineScheduleResource",
    "PipelineScheduleVariableResource",
    "PipelineTriggerResource",
    "ProjectAccessTokenResource",
    "ProjectFreezePeriodResource",
    "ProjectHookResource",
    "ProjectLabelResource",
    "ProjectLevelMrApprovalsResource",
    "ProjectMembershipResource",
    "ProjectShareGroupResource",
    "ProjectVariableResource",
    "Resource",
    "TagProtectionResource",
]
