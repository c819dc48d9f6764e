"""
Pulumi modules for the EKS stack
Simple function-based approach: each module declares resources and returns their outputs
"""

from .vpc import create_vpc_resources
from .iam import create_iam_resources
from .eks import create_eks_resources

__all__ = [
    "create_vpc_resources",
    "create_iam_resources",
    "create_eks_resources",
]
