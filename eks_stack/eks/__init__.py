"""
EKS Module
Creates the EKS control plane and managed node groups
"""

from .functions import create_eks_cluster, create_node_group, create_eks_resources

__all__ = [
    "create_eks_cluster",
    "create_node_group",
    "create_eks_resources",
]
