"""
VPC Module for EKS
Network topology (VPC, subnets, gateways), routing and the cluster security group
"""

from .functions import (
    create_vpc,
    create_subnets,
    create_nat_gateway,
    create_internet_gateway,
    create_route_table,
    create_cluster_security_group,
    create_vpc_resources,
)

__all__ = [
    "create_vpc",
    "create_subnets",
    "create_nat_gateway",
    "create_internet_gateway",
    "create_route_table",
    "create_cluster_security_group",
    "create_vpc_resources",
]
