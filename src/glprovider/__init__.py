"""GitLab declarative resource provider.

Expose GitLab projects, groups, variables, hooks, tokens and friends as managed
resources with stable composite identifiers and versioned state migrations.
"""

__version__ = "0.1.0"
__author__ = "Platform Engineering Team"
__license__ = "Apache-2.0"
