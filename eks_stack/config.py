"""
Configuration management for the EKS stack
"""

import pulumi
from typing import Dict, List, Optional


DEFAULT_PRIVATE_SUBNET_CIDRS = ["10.0.1.0/24", "10.0.2.0/24", "10.0.3.0/24"]
DEFAULT_PUBLIC_SUBNET_CIDRS = ["10.0.4.0/24", "10.0.5.0/24", "10.0.6.0/24"]


class Config:
    """Centralized configuration management for the EKS stack"""

    def __init__(self):
        self.config = pulumi.Config()
        aws_config = pulumi.Config("aws")

        # Naming
        self.prefix = self.config.get("prefix") or "pulumi-eks"

        # AWS Configuration
        self.aws_region = aws_config.get("region") or "us-east-2"
        self.availability_zones = self._get_object("availability_zones", [
            f"{self.aws_region}{suffix}" for suffix in ("a", "b", "c")
        ])

        # VPC Configuration
        self.vpc_cidr = self.config.get("vpc_cidr") or "10.0.0.0/16"
        self.instance_tenancy = self.config.get("instance_tenancy") or "default"
        self.enable_dns_hostnames = self._get_bool("enable_dns_hostnames", True)
        self.private_subnet_cidrs = self._get_object("private_subnet_cidrs", list(DEFAULT_PRIVATE_SUBNET_CIDRS))
        self.public_subnet_cidrs = self._get_object("public_subnet_cidrs", list(DEFAULT_PUBLIC_SUBNET_CIDRS))

        # Cluster Configuration
        self.cluster_version: Optional[str] = self.config.get("cluster_version")
        self.public_access_cidrs = self._get_object("public_access_cidrs", ["0.0.0.0/0"])
        self.cluster_ingress_ports = self._get_object("cluster_ingress_ports", [80])

        # Node Configuration
        self.node_group_count = self._get_int("node_group_count", 2)
        self.node_desired_size = self._get_int("node_desired_size", 1)
        self.node_min_size = self._get_int("node_min_size", 1)
        self.node_max_size = self._get_int("node_max_size", 1)
        self.node_instance_types: Optional[List[str]] = self.config.get_object("node_instance_types")

        # Additional tags
        self.additional_tags = self.config.get_object("tags") or {}

    def _get_object(self, key: str, default):
        value = self.config.get_object(key)
        return default if value is None else value

    def _get_bool(self, key: str, default: bool) -> bool:
        value = self.config.get_bool(key)
        return default if value is None else value

    def _get_int(self, key: str, default: int) -> int:
        value = self.config.get_int(key)
        return default if value is None else value

    @property
    def common_tags(self) -> Dict[str, str]:
        """Get common tags for all resources"""
        base_tags = {
            "Project": self.prefix,
            "ManagedBy": "pulumi",
        }
        base_tags.update(self.additional_tags)
        return base_tags


def get_config() -> Config:
    """Get the global configuration instance"""
    return Config()
