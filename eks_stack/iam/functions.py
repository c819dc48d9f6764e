"""
IAM Module Functions
Creates IAM roles and policy attachments for EKS cluster and node groups
"""

import json
import pulumi
import pulumi_aws as aws
from typing import Dict, List, Any


CLUSTER_POLICY_ARNS = [
    "arn:aws:iam::aws:policy/AmazonEKSServicePolicy",
    "arn:aws:iam::aws:policy/AmazonEKSClusterPolicy",
]

NODE_GROUP_POLICY_ARNS = [
    "arn:aws:iam::aws:policy/AmazonEKSWorkerNodePolicy",
    "arn:aws:iam::aws:policy/AmazonEKS_CNI_Policy",
    "arn:aws:iam::aws:policy/AmazonEC2ContainerRegistryReadOnly",
]


def assume_role_policy(service: str) -> str:
    """Trust policy letting an AWS service principal assume the role"""
    return json.dumps({
        "Version": "2012-10-17",
        "Statement": [{
            "Sid": "",
            "Effect": "Allow",
            "Principal": {"Service": service},
            "Action": "sts:AssumeRole",
        }],
    })


def create_role(resource_name: str, service: str, policy_arns: List[str],
                attachment_prefix: str, tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Create IAM role and attach managed policies to it

    Args:
        resource_name: Pulumi resource name of the role
        service: Service principal allowed to assume the role
        policy_arns: Managed policy ARNs to attach
        attachment_prefix: Resource name prefix for the attachments
        tags: Additional tags

    Returns:
        Dict with role resource, attachments and outputs
    """
    tags = tags or {}

    role = aws.iam.Role(
        resource_name,
        assume_role_policy=assume_role_policy(service),
        tags={
            **tags,
            "Name": resource_name,
        }
    )

    policy_attachments = []
    for i, policy_arn in enumerate(policy_arns):
        attachment = aws.iam.RolePolicyAttachment(
            f"{attachment_prefix}-{i}",
            policy_arn=policy_arn,
            role=role.name
        )
        policy_attachments.append(attachment)

    return {
        "role": role,
        "policy_attachments": policy_attachments,
        "role_arn": role.arn,
        "role_name": role.name
    }


def create_cluster_role(name: str, tags: Dict[str, str] = None) -> Dict[str, Any]:
    """IAM role assumed by the EKS control plane"""
    return create_role(
        f"{name}-eks-iam-role",
        "eks.amazonaws.com",
        CLUSTER_POLICY_ARNS,
        f"{name}-rpa",
        tags
    )


def create_node_group_role(name: str, tags: Dict[str, str] = None) -> Dict[str, Any]:
    """IAM role assumed by node group EC2 instances"""
    return create_role(
        f"{name}-nodegroup-iam-role",
        "ec2.amazonaws.com",
        NODE_GROUP_POLICY_ARNS,
        f"{name}-ngpa",
        tags
    )


def create_iam_resources(name: str, tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Create IAM resources for EKS

    Args:
        name: Resource name prefix
        tags: Additional tags

    Returns:
        Dict with all IAM resources and outputs
    """
    tags = tags or {}

    pulumi.log.info(
        f"Declaring IAM roles with {len(CLUSTER_POLICY_ARNS)} cluster and "
        f"{len(NODE_GROUP_POLICY_ARNS)} node group policy attachments"
    )

    cluster_role_result = create_cluster_role(name, tags)
    node_role_result = create_node_group_role(name, tags)

    return {
        "cluster_role_arn": cluster_role_result["role_arn"],
        "cluster_role_name": cluster_role_result["role_name"],
        "node_group_role_arn": node_role_result["role_arn"],
        "node_group_role_name": node_role_result["role_name"],
        # Keep references to resources for dependencies
        "_cluster_role": cluster_role_result["role"],
        "_node_role": node_role_result["role"],
        "_cluster_policy_attachments": cluster_role_result["policy_attachments"],
        "_node_policy_attachments": node_role_result["policy_attachments"]
    }
