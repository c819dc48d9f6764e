"""
EKS Stack
VPC across three AZs, NAT/Internet gateways, IAM roles, EKS control plane and managed node groups
"""
import pulumi
from eks_stack.config import get_config
from eks_stack.validation import validate_config
from eks_stack.vpc import create_vpc_resources
from eks_stack.iam import create_iam_resources
from eks_stack.eks import create_eks_resources

# Configuration
config = get_config()
validate_config(config)

pulumi.log.info(f"Deploying {config.prefix} to {config.aws_region}")

# 1. Network topology and routing
network = create_vpc_resources(
    name=config.prefix,
    vpc_cidr=config.vpc_cidr,
    availability_zones=config.availability_zones,
    private_subnet_cidrs=config.private_subnet_cidrs,
    public_subnet_cidrs=config.public_subnet_cidrs,
    instance_tenancy=config.instance_tenancy,
    enable_dns_hostnames=config.enable_dns_hostnames,
    cluster_ingress_ports=config.cluster_ingress_ports,
    tags=config.common_tags
)

# 2. Identity
iam = create_iam_resources(config.prefix, tags=config.common_tags)

# 3. EKS control plane and node groups
eks = create_eks_resources(
    name=config.prefix,
    cluster_role_arn=iam["cluster_role_arn"],
    node_group_role_arn=iam["node_group_role_arn"],
    cluster_subnet_ids=network["private_subnet_ids"] + network["public_subnet_ids"],
    node_subnet_ids=network["private_subnet_ids"],
    cluster_security_group_id=network["cluster_security_group_id"],
    node_group_count=config.node_group_count,
    node_desired_size=config.node_desired_size,
    node_min_size=config.node_min_size,
    node_max_size=config.node_max_size,
    node_instance_types=config.node_instance_types,
    cluster_version=config.cluster_version,
    public_access_cidrs=config.public_access_cidrs,
    cluster_depends_on=iam["_cluster_policy_attachments"],
    node_depends_on=iam["_node_policy_attachments"],
    tags=config.common_tags
)

# Exports
pulumi.export("vpc_id", network["vpc_id"])
pulumi.export("private_subnet_ids", network["private_subnet_ids"])
pulumi.export("public_subnet_ids", network["public_subnet_ids"])
pulumi.export("nat_gateway_public_ip", network["nat_gateway_public_ip"])
pulumi.export("cluster_security_group_id", network["cluster_security_group_id"])
pulumi.export("cluster_name", eks["cluster_name"])
pulumi.export("cluster_endpoint", eks["cluster_endpoint"])
pulumi.export("node_group_names", eks["node_group_names"])
pulumi.export("kubeconfig_command",
    pulumi.Output.concat(
        "aws eks update-kubeconfig --region ", config.aws_region, " --name ",
        eks["cluster_name"]
    ))
