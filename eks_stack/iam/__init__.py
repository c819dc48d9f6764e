"""
IAM Module for EKS
Creates IAM roles and managed policy attachments for the EKS cluster and node groups
"""

from .functions import (
    CLUSTER_POLICY_ARNS,
    NODE_GROUP_POLICY_ARNS,
    assume_role_policy,
    create_role,
    create_cluster_role,
    create_node_group_role,
    create_iam_resources,
)

__all__ = [
    "CLUSTER_POLICY_ARNS",
    "NODE_GROUP_POLICY_ARNS",
    "assume_role_policy",
    "create_role",
    "create_cluster_role",
    "create_node_group_role",
    "create_iam_resources",
]
