"""
EKS Module Functions
Creates the EKS cluster and managed node groups
"""

import pulumi
import pulumi_aws as aws
from typing import Dict, List, Any, Optional


def create_eks_cluster(name: str, role_arn: pulumi.Output[str],
                      subnet_ids: List[pulumi.Output[str]], security_group_ids: List[pulumi.Output[str]],
                      public_access_cidrs: List[str] = None,
                      version: Optional[str] = None,
                      depends_on: List[pulumi.Resource] = None,
                      tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Create EKS cluster

    Args:
        name: Resource name prefix
        role_arn: IAM role ARN for cluster
        subnet_ids: List of subnet IDs (private and public)
        security_group_ids: List of security group IDs
        public_access_cidrs: List of CIDRs for public API access
        version: Kubernetes version, AWS default when unset
        depends_on: Resources that must exist first (the cluster role's policy attachments)
        tags: Additional tags

    Returns:
        Dict with cluster resource and outputs
    """
    tags = tags or {}
    public_access_cidrs = ["0.0.0.0/0"] if public_access_cidrs is None else public_access_cidrs

    opts = pulumi.ResourceOptions()
    if depends_on:
        opts = pulumi.ResourceOptions(depends_on=depends_on)

    cluster = aws.eks.Cluster(
        f"{name}-cluster",
        role_arn=role_arn,
        version=version,
        vpc_config=aws.eks.ClusterVpcConfigArgs(
            public_access_cidrs=public_access_cidrs,
            security_group_ids=security_group_ids,
            subnet_ids=subnet_ids
        ),
        tags={
            **tags,
            "Name": f"{name}-cluster",
        },
        opts=opts
    )

    return {
        "cluster": cluster,
        "cluster_name": cluster.name,
        "cluster_arn": cluster.arn,
        "cluster_endpoint": cluster.endpoint
    }


def create_node_group(name: str, index: int, cluster_name: pulumi.Output[str], role_arn: pulumi.Output[str],
                     subnet_ids: List[pulumi.Output[str]], desired_size: int = 1, min_size: int = 1,
                     max_size: int = 1, instance_types: Optional[List[str]] = None,
                     depends_on: List[pulumi.Resource] = None,
                     tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Create EKS managed node group

    Args:
        name: Resource name prefix
        index: Node group number, starting at 1
        cluster_name: EKS cluster name
        role_arn: IAM role ARN for node group
        subnet_ids: List of (private) subnet IDs
        desired_size: Desired number of nodes
        min_size: Minimum number of nodes
        max_size: Maximum number of nodes
        instance_types: List of EC2 instance types, AWS default when unset
        depends_on: Resources that must exist first (the node role's policy attachments)
        tags: Additional tags

    Returns:
        Dict with node group resource and outputs
    """
    tags = tags or {}
    group_name = f"{name}-worker-group-{index}"

    opts = pulumi.ResourceOptions()
    if depends_on:
        opts = pulumi.ResourceOptions(depends_on=depends_on)

    node_group = aws.eks.NodeGroup(
        group_name,
        cluster_name=cluster_name,
        subnet_ids=subnet_ids,
        node_role_arn=role_arn,
        instance_types=instance_types,
        scaling_config=aws.eks.NodeGroupScalingConfigArgs(
            desired_size=desired_size,
            min_size=min_size,
            max_size=max_size
        ),
        tags={
            **tags,
            "Name": group_name,
        },
        opts=opts
    )

    return {
        "node_group": node_group,
        "node_group_name": node_group.node_group_name,
        "node_group_arn": node_group.arn
    }


def create_eks_resources(name: str,
                        cluster_role_arn: pulumi.Output[str],
                        node_group_role_arn: pulumi.Output[str],
                        cluster_subnet_ids: List[pulumi.Output[str]],
                        node_subnet_ids: List[pulumi.Output[str]],
                        cluster_security_group_id: pulumi.Output[str],
                        node_group_count: int = 2,
                        node_desired_size: int = 1,
                        node_min_size: int = 1,
                        node_max_size: int = 1,
                        node_instance_types: Optional[List[str]] = None,
                        cluster_version: Optional[str] = None,
                        public_access_cidrs: List[str] = None,
                        cluster_depends_on: List[pulumi.Resource] = None,
                        node_depends_on: List[pulumi.Resource] = None,
                        tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Create complete EKS infrastructure

    Args:
        name: Resource name prefix
        cluster_role_arn: IAM role ARN for cluster
        node_group_role_arn: IAM role ARN shared by all node groups
        cluster_subnet_ids: Subnets for the control plane
        node_subnet_ids: Subnets for worker nodes
        cluster_security_group_id: Cluster security group ID
        node_group_count: Number of managed node groups
        node_desired_size: Desired number of nodes per group
        node_min_size: Minimum number of nodes per group
        node_max_size: Maximum number of nodes per group
        node_instance_types: List of EC2 instance types
        cluster_version: Kubernetes version
        public_access_cidrs: List of CIDRs for public API access
        cluster_depends_on: Extra dependencies for the cluster
        node_depends_on: Extra dependencies for node groups
        tags: Additional tags

    Returns:
        Dict with all EKS resources and outputs
    """
    tags = tags or {}

    pulumi.log.info(
        f"Declaring EKS cluster {name}-cluster with {node_group_count} node group(s) "
        f"sized {node_min_size}/{node_desired_size}/{node_max_size} (min/desired/max)"
    )

    cluster_result = create_eks_cluster(
        name=name,
        role_arn=cluster_role_arn,
        subnet_ids=cluster_subnet_ids,
        security_group_ids=[cluster_security_group_id],
        public_access_cidrs=public_access_cidrs,
        version=cluster_version,
        depends_on=cluster_depends_on,
        tags=tags
    )

    node_group_results = []
    for index in range(1, node_group_count + 1):
        node_group_result = create_node_group(
            name=name,
            index=index,
            cluster_name=cluster_result["cluster"].name,
            role_arn=node_group_role_arn,
            subnet_ids=node_subnet_ids,
            desired_size=node_desired_size,
            min_size=node_min_size,
            max_size=node_max_size,
            instance_types=node_instance_types,
            depends_on=node_depends_on,
            tags=tags
        )
        node_group_results.append(node_group_result)

    return {
        "cluster_name": cluster_result["cluster_name"],
        "cluster_arn": cluster_result["cluster_arn"],
        "cluster_endpoint": cluster_result["cluster_endpoint"],
        "node_group_names": [result["node_group_name"] for result in node_group_results],
        "node_group_arns": [result["node_group_arn"] for result in node_group_results],
        # Keep references to resources for dependencies
        "_cluster": cluster_result["cluster"],
        "_node_groups": [result["node_group"] for result in node_group_results]
    }
