"""
Unit tests for the function-based Pulumi modules
AWS resource constructors are mocked; tests check what gets declared and how it is wired
"""

import json
import unittest
from unittest.mock import Mock, patch
import sys
import os

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from eks_stack.vpc.functions import create_vpc_resources, create_route_table, create_subnets
from eks_stack.iam.functions import (
    CLUSTER_POLICY_ARNS,
    NODE_GROUP_POLICY_ARNS,
    assume_role_policy,
    create_iam_resources,
)
from eks_stack.eks.functions import create_eks_resources


AZS = ["us-east-2a", "us-east-2b", "us-east-2c"]
PRIVATE_CIDRS = ["10.0.1.0/24", "10.0.2.0/24", "10.0.3.0/24"]
PUBLIC_CIDRS = ["10.0.4.0/24", "10.0.5.0/24", "10.0.6.0/24"]


def _named_mock(resource_name, **kwargs):
    """Resource stand-in whose id is derived from its Pulumi resource name"""
    resource = Mock()
    resource.id = f"{resource_name}-id"
    return resource


def _resource_names(constructor):
    return [call.args[0] for call in constructor.call_args_list]


class TestVpcFunctions(unittest.TestCase):
    """Network topology and routing"""

    def setUp(self):
        aws_patcher = patch('eks_stack.vpc.functions.aws')
        pulumi_patcher = patch('eks_stack.vpc.functions.pulumi')
        self.mock_aws = aws_patcher.start()
        self.mock_pulumi = pulumi_patcher.start()
        self.addCleanup(aws_patcher.stop)
        self.addCleanup(pulumi_patcher.stop)

        ec2 = self.mock_aws.ec2
        for constructor in (ec2.Vpc, ec2.Subnet, ec2.Eip, ec2.NatGateway, ec2.InternetGateway,
                            ec2.RouteTable, ec2.RouteTableAssociation, ec2.SecurityGroup):
            constructor.side_effect = _named_mock

    def _create(self, **overrides):
        kwargs = dict(
            name="test",
            vpc_cidr="10.0.0.0/16",
            availability_zones=AZS,
            private_subnet_cidrs=PRIVATE_CIDRS,
            public_subnet_cidrs=PUBLIC_CIDRS,
        )
        kwargs.update(overrides)
        return create_vpc_resources(**kwargs)

    def test_vpc_function_structure(self):
        """Test that VPC function returns expected structure"""
        result = self._create()

        for key in ("vpc_id", "vpc_cidr_block", "private_subnet_ids", "public_subnet_ids",
                    "nat_gateway_id", "nat_gateway_public_ip", "cluster_security_group_id"):
            self.assertIn(key, result)
        self.assertEqual(result["vpc_id"], "test-vpc-id")
        self.assertEqual(result["availability_zones"], AZS)

    def test_vpc_arguments(self):
        self._create()

        vpc_call = self.mock_aws.ec2.Vpc.call_args
        self.assertEqual(vpc_call.args[0], "test-vpc")
        self.assertEqual(vpc_call.kwargs["cidr_block"], "10.0.0.0/16")
        self.assertTrue(vpc_call.kwargs["enable_dns_hostnames"])
        self.assertEqual(vpc_call.kwargs["instance_tenancy"], "default")
        self.assertEqual(vpc_call.kwargs["tags"]["Name"], "test-vpc")

    def test_six_subnets_spread_across_azs(self):
        result = self._create()

        self.assertEqual(
            _resource_names(self.mock_aws.ec2.Subnet),
            [
                "test-priv-subnet-1", "test-priv-subnet-2", "test-priv-subnet-3",
                "test-pub-subnet-1", "test-pub-subnet-2", "test-pub-subnet-3",
            ],
        )
        calls = self.mock_aws.ec2.Subnet.call_args_list
        self.assertEqual([c.kwargs["cidr_block"] for c in calls], PRIVATE_CIDRS + PUBLIC_CIDRS)
        self.assertEqual([c.kwargs["availability_zone"] for c in calls], AZS + AZS)
        for call in calls:
            self.assertEqual(call.kwargs["vpc_id"], "test-vpc-id")

        self.assertEqual(
            result["private_subnet_ids"],
            ["test-priv-subnet-1-id", "test-priv-subnet-2-id", "test-priv-subnet-3-id"],
        )

    def test_subnet_elb_role_tags(self):
        self._create()

        calls = self.mock_aws.ec2.Subnet.call_args_list
        for call in calls[:3]:
            self.assertEqual(call.kwargs["tags"]["kubernetes.io/role/internal-elb"], "1")
        for call in calls[3:]:
            self.assertEqual(call.kwargs["tags"]["kubernetes.io/role/elb"], "1")

    def test_nat_gateway_in_first_public_subnet(self):
        self._create()

        eip_call = self.mock_aws.ec2.Eip.call_args
        self.assertEqual(eip_call.args[0], "test-eip1")
        self.assertEqual(eip_call.kwargs["domain"], "vpc")

        nat_call = self.mock_aws.ec2.NatGateway.call_args
        self.assertEqual(nat_call.args[0], "test-nat-gw-1")
        self.assertEqual(nat_call.kwargs["allocation_id"], "test-eip1-id")
        self.assertEqual(nat_call.kwargs["subnet_id"], "test-pub-subnet-1-id")

    def test_internet_gateway_attached_to_vpc(self):
        self._create()

        igw_call = self.mock_aws.ec2.InternetGateway.call_args
        self.assertEqual(igw_call.args[0], "test-gw")
        self.assertEqual(igw_call.kwargs["vpc_id"], "test-vpc-id")

    def test_route_tables_point_at_nat_and_igw(self):
        self._create()

        self.assertEqual(
            _resource_names(self.mock_aws.ec2.RouteTable),
            ["test-rtb-private-1", "test-rtb-public-1"],
        )
        route_calls = self.mock_aws.ec2.RouteTableRouteArgs.call_args_list
        self.assertEqual(len(route_calls), 2)

        private_route, public_route = (c.kwargs for c in route_calls)
        self.assertEqual(private_route["cidr_block"], "0.0.0.0/0")
        self.assertEqual(private_route["nat_gateway_id"], "test-nat-gw-1-id")
        self.assertIsNone(private_route["gateway_id"])
        self.assertEqual(public_route["cidr_block"], "0.0.0.0/0")
        self.assertEqual(public_route["gateway_id"], "test-gw-id")
        self.assertIsNone(public_route["nat_gateway_id"])

    def test_six_route_table_associations(self):
        self._create()

        self.assertEqual(
            _resource_names(self.mock_aws.ec2.RouteTableAssociation),
            [
                "test-rtb-assoc-priv-1", "test-rtb-assoc-priv-2", "test-rtb-assoc-priv-3",
                "test-rtb-assoc-pub-1", "test-rtb-assoc-pub-2", "test-rtb-assoc-pub-3",
            ],
        )
        calls = self.mock_aws.ec2.RouteTableAssociation.call_args_list
        for call in calls[:3]:
            self.assertEqual(call.kwargs["route_table_id"], "test-rtb-private-1-id")
        for call in calls[3:]:
            self.assertEqual(call.kwargs["route_table_id"], "test-rtb-public-1-id")
        self.assertEqual(calls[4].kwargs["subnet_id"], "test-pub-subnet-2-id")

    def test_cluster_security_group_rules(self):
        self._create()

        sg_call = self.mock_aws.ec2.SecurityGroup.call_args
        self.assertEqual(sg_call.args[0], "test-cluster-sg")
        self.assertEqual(sg_call.kwargs["vpc_id"], "test-vpc-id")

        egress = self.mock_aws.ec2.SecurityGroupEgressArgs.call_args.kwargs
        self.assertEqual(egress["protocol"], "-1")
        self.assertEqual(egress["cidr_blocks"], ["0.0.0.0/0"])

        ingress = self.mock_aws.ec2.SecurityGroupIngressArgs.call_args.kwargs
        self.assertEqual(ingress["protocol"], "tcp")
        self.assertEqual((ingress["from_port"], ingress["to_port"]), (80, 80))
        self.assertEqual(ingress["cidr_blocks"], ["0.0.0.0/0"])

    def test_extra_ingress_ports(self):
        self._create(cluster_ingress_ports=[80, 443])

        ports = [c.kwargs["from_port"] for c in self.mock_aws.ec2.SecurityGroupIngressArgs.call_args_list]
        self.assertEqual(ports, [80, 443])

    def test_tags_propagate(self):
        self._create(tags={"Team": "platform"})

        self.assertEqual(self.mock_aws.ec2.Vpc.call_args.kwargs["tags"]["Team"], "platform")
        self.assertEqual(self.mock_aws.ec2.NatGateway.call_args.kwargs["tags"]["Team"], "platform")

    def test_route_table_requires_exactly_one_gateway(self):
        with self.assertRaises(ValueError):
            create_route_table("test", "vpc-1", "public", ["subnet-1"])
        with self.assertRaises(ValueError):
            create_route_table("test", "vpc-1", "public", ["subnet-1"],
                               gateway_id="igw-1", nat_gateway_id="nat-1")
        self.mock_aws.ec2.RouteTable.assert_not_called()

    def test_route_table_rejects_unknown_scope(self):
        with self.assertRaises(ValueError):
            create_route_table("test", "vpc-1", "isolated", ["subnet-1"], gateway_id="igw-1")

    def test_subnets_need_enough_azs(self):
        with self.assertRaises(ValueError):
            create_subnets("test", "vpc-1", "priv", PRIVATE_CIDRS, AZS[:2])
        self.mock_aws.ec2.Subnet.assert_not_called()

    def test_unknown_subnet_kind(self):
        with self.assertRaises(ValueError):
            create_subnets("test", "vpc-1", "isolated", PRIVATE_CIDRS, AZS)


class TestIamFunctions(unittest.TestCase):
    """IAM roles and policy attachments"""

    def setUp(self):
        aws_patcher = patch('eks_stack.iam.functions.aws')
        pulumi_patcher = patch('eks_stack.iam.functions.pulumi')
        self.mock_aws = aws_patcher.start()
        pulumi_patcher.start()
        self.addCleanup(aws_patcher.stop)
        self.addCleanup(pulumi_patcher.stop)

        def make_role(resource_name, **kwargs):
            role = Mock()
            role.arn = f"arn:aws:iam::123456789012:role/{resource_name}"
            role.name = resource_name
            return role

        self.mock_aws.iam.Role.side_effect = make_role
        self.mock_aws.iam.RolePolicyAttachment.side_effect = _named_mock

    def test_iam_function_structure(self):
        """Test that IAM function returns expected structure"""
        result = create_iam_resources("test")

        self.assertEqual(result["cluster_role_arn"], "arn:aws:iam::123456789012:role/test-eks-iam-role")
        self.assertEqual(result["cluster_role_name"], "test-eks-iam-role")
        self.assertEqual(result["node_group_role_arn"], "arn:aws:iam::123456789012:role/test-nodegroup-iam-role")
        self.assertEqual(result["node_group_role_name"], "test-nodegroup-iam-role")
        self.assertEqual(len(result["_cluster_policy_attachments"]), 2)
        self.assertEqual(len(result["_node_policy_attachments"]), 3)

    def test_trust_policies(self):
        create_iam_resources("test")

        cluster_call, node_call = self.mock_aws.iam.Role.call_args_list
        cluster_policy = json.loads(cluster_call.kwargs["assume_role_policy"])
        node_policy = json.loads(node_call.kwargs["assume_role_policy"])
        self.assertEqual(cluster_policy["Statement"][0]["Principal"], {"Service": "eks.amazonaws.com"})
        self.assertEqual(node_policy["Statement"][0]["Principal"], {"Service": "ec2.amazonaws.com"})

    def test_policy_attachments(self):
        create_iam_resources("test")

        calls = self.mock_aws.iam.RolePolicyAttachment.call_args_list
        self.assertEqual(
            [c.args[0] for c in calls],
            ["test-rpa-0", "test-rpa-1", "test-ngpa-0", "test-ngpa-1", "test-ngpa-2"],
        )
        self.assertEqual(
            [c.kwargs["policy_arn"] for c in calls],
            CLUSTER_POLICY_ARNS + NODE_GROUP_POLICY_ARNS,
        )
        self.assertEqual(
            [c.kwargs["role"] for c in calls],
            ["test-eks-iam-role"] * 2 + ["test-nodegroup-iam-role"] * 3,
        )

    def test_assume_role_policy_document(self):
        policy = json.loads(assume_role_policy("eks.amazonaws.com"))

        self.assertEqual(policy["Version"], "2012-10-17")
        statement = policy["Statement"][0]
        self.assertEqual(statement["Effect"], "Allow")
        self.assertEqual(statement["Action"], "sts:AssumeRole")


class TestEksFunctions(unittest.TestCase):
    """EKS control plane and managed node groups"""

    def setUp(self):
        aws_patcher = patch('eks_stack.eks.functions.aws')
        pulumi_patcher = patch('eks_stack.eks.functions.pulumi')
        self.mock_aws = aws_patcher.start()
        self.mock_pulumi = pulumi_patcher.start()
        self.addCleanup(aws_patcher.stop)
        self.addCleanup(pulumi_patcher.stop)

        mock_cluster = Mock()
        mock_cluster.name = "test-cluster-abc123"
        mock_cluster.endpoint = "https://example.eks.amazonaws.com"
        self.mock_aws.eks.Cluster.return_value = mock_cluster
        self.mock_aws.eks.NodeGroup.side_effect = _named_mock

        self.cluster_attachments = [Mock(), Mock()]
        self.node_attachments = [Mock(), Mock(), Mock()]

    def _create(self, **overrides):
        kwargs = dict(
            name="test",
            cluster_role_arn="arn:cluster-role",
            node_group_role_arn="arn:node-role",
            cluster_subnet_ids=["priv-1", "priv-2", "priv-3", "pub-1", "pub-2", "pub-3"],
            node_subnet_ids=["priv-1", "priv-2", "priv-3"],
            cluster_security_group_id="sg-1",
            cluster_depends_on=self.cluster_attachments,
            node_depends_on=self.node_attachments,
        )
        kwargs.update(overrides)
        return create_eks_resources(**kwargs)

    def test_eks_function_structure(self):
        result = self._create()

        self.assertEqual(result["cluster_name"], "test-cluster-abc123")
        self.assertEqual(result["cluster_endpoint"], "https://example.eks.amazonaws.com")
        self.assertEqual(len(result["node_group_names"]), 2)
        self.assertEqual(len(result["_node_groups"]), 2)

    def test_cluster_vpc_config(self):
        self._create()

        cluster_call = self.mock_aws.eks.Cluster.call_args
        self.assertEqual(cluster_call.args[0], "test-cluster")
        self.assertEqual(cluster_call.kwargs["role_arn"], "arn:cluster-role")
        self.assertIsNone(cluster_call.kwargs["version"])

        vpc_config = self.mock_aws.eks.ClusterVpcConfigArgs.call_args.kwargs
        self.assertEqual(len(vpc_config["subnet_ids"]), 6)
        self.assertEqual(vpc_config["security_group_ids"], ["sg-1"])
        self.assertEqual(vpc_config["public_access_cidrs"], ["0.0.0.0/0"])

    def test_two_node_groups_with_fixed_scaling(self):
        self._create()

        self.assertEqual(
            _resource_names(self.mock_aws.eks.NodeGroup),
            ["test-worker-group-1", "test-worker-group-2"],
        )
        for call in self.mock_aws.eks.NodeGroup.call_args_list:
            self.assertEqual(call.kwargs["cluster_name"], "test-cluster-abc123")
            self.assertEqual(call.kwargs["node_role_arn"], "arn:node-role")
            self.assertEqual(call.kwargs["subnet_ids"], ["priv-1", "priv-2", "priv-3"])

        scaling_calls = self.mock_aws.eks.NodeGroupScalingConfigArgs.call_args_list
        self.assertEqual(len(scaling_calls), 2)
        for call in scaling_calls:
            self.assertEqual(call.kwargs, {"desired_size": 1, "min_size": 1, "max_size": 1})

    def test_node_group_count_is_configurable(self):
        result = self._create(node_group_count=3)

        self.assertEqual(self.mock_aws.eks.NodeGroup.call_count, 3)
        self.assertEqual(len(result["node_group_arns"]), 3)

    def test_resources_wait_for_policy_attachments(self):
        self._create()

        self.mock_pulumi.ResourceOptions.assert_any_call(depends_on=self.cluster_attachments)
        self.mock_pulumi.ResourceOptions.assert_any_call(depends_on=self.node_attachments)


if __name__ == "__main__":
    # Run the tests
    unittest.main(verbosity=2)
