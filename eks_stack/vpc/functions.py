"""
VPC Module Functions
Creates the VPC, subnets, NAT/Internet gateways, route tables and the cluster security group
"""

import pulumi
import pulumi_aws as aws
from typing import Dict, List, Any, Optional


SUBNET_KINDS = {
    "priv": "kubernetes.io/role/internal-elb",
    "pub": "kubernetes.io/role/elb",
}

# Route table scope -> subnet kind used in association names
ROUTE_SCOPES = {
    "private": "priv",
    "public": "pub",
}


def create_vpc(name: str, cidr: str, instance_tenancy: str = "default",
               enable_dns_hostnames: bool = True, tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Create VPC

    Args:
        name: Resource name prefix
        cidr: VPC CIDR block
        instance_tenancy: Tenancy of instances launched into the VPC
        enable_dns_hostnames: Enable DNS hostnames in VPC
        tags: Additional tags

    Returns:
        Dict with vpc resource and outputs
    """
    tags = tags or {}

    vpc = aws.ec2.Vpc(
        f"{name}-vpc",
        cidr_block=cidr,
        enable_dns_hostnames=enable_dns_hostnames,
        instance_tenancy=instance_tenancy,
        tags={
            **tags,
            "Name": f"{name}-vpc",
        }
    )

    return {
        "vpc": vpc,
        "vpc_id": vpc.id,
        "vpc_cidr_block": vpc.cidr_block
    }


def create_subnets(name: str, vpc_id: pulumi.Output[str], kind: str, subnet_cidrs: List[str],
                   availability_zones: List[str], tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Create one subnet per CIDR, the i-th CIDR in the i-th availability zone

    Args:
        name: Resource name prefix
        vpc_id: VPC ID
        kind: "priv" or "pub"
        subnet_cidrs: List of CIDR blocks for subnets
        availability_zones: List of availability zones
        tags: Additional tags

    Returns:
        Dict with subnet resources and outputs
    """
    if kind not in SUBNET_KINDS:
        raise ValueError(f"Unknown subnet kind '{kind}', expected one of {sorted(SUBNET_KINDS)}")
    if len(subnet_cidrs) > len(availability_zones):
        raise ValueError(
            f"{len(subnet_cidrs)} {kind} subnets requested but only "
            f"{len(availability_zones)} availability zones given"
        )
    tags = tags or {}

    subnets = []
    for i, cidr in enumerate(subnet_cidrs):
        subnet_name = f"{name}-{kind}-subnet-{i+1}"
        subnet = aws.ec2.Subnet(
            subnet_name,
            vpc_id=vpc_id,
            cidr_block=cidr,
            availability_zone=availability_zones[i],
            tags={
                **tags,
                "Name": subnet_name,
                SUBNET_KINDS[kind]: "1",
            }
        )
        subnets.append(subnet)

    return {
        "subnets": subnets,
        "subnet_ids": [subnet.id for subnet in subnets],
        "availability_zones": availability_zones[:len(subnet_cidrs)]
    }


def create_nat_gateway(name: str, subnet_id: pulumi.Output[str], tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Create Elastic IP and NAT Gateway

    The NAT gateway must sit in a public subnet for private instances to reach the internet.
    """
    tags = tags or {}

    eip = aws.ec2.Eip(
        f"{name}-eip1",
        domain="vpc",
        tags={
            **tags,
            "Name": f"{name}-eip1",
        }
    )

    nat_gateway = aws.ec2.NatGateway(
        f"{name}-nat-gw-1",
        allocation_id=eip.id,
        subnet_id=subnet_id,
        tags={
            **tags,
            "Name": f"{name}-nat-gw-1",
        }
    )

    return {
        "eip": eip,
        "nat_gateway": nat_gateway,
        "nat_gateway_id": nat_gateway.id,
        "public_ip": eip.public_ip
    }


def create_internet_gateway(name: str, vpc_id: pulumi.Output[str], tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Create Internet Gateway for VPC

    Args:
        name: Resource name prefix
        vpc_id: VPC ID to attach to
        tags: Additional tags

    Returns:
        Dict with igw resource and outputs
    """
    tags = tags or {}

    igw = aws.ec2.InternetGateway(
        f"{name}-gw",
        vpc_id=vpc_id,
        tags={
            **tags,
            "Name": f"{name}-gw",
        }
    )

    return {
        "igw": igw,
        "igw_id": igw.id
    }


def create_route_table(name: str, vpc_id: pulumi.Output[str], scope: str,
                       subnet_ids: List[pulumi.Output[str]],
                       gateway_id: Optional[pulumi.Output[str]] = None,
                       nat_gateway_id: Optional[pulumi.Output[str]] = None,
                       tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Create a route table with a default route and associate subnets with it

    Args:
        name: Resource name prefix
        vpc_id: VPC ID
        scope: "private" or "public"
        subnet_ids: Subnet IDs to associate
        gateway_id: Internet Gateway ID for the default route
        nat_gateway_id: NAT Gateway ID for the default route
        tags: Additional tags

    Returns:
        Dict with route table resources and outputs
    """
    if scope not in ROUTE_SCOPES:
        raise ValueError(f"Unknown route table scope '{scope}', expected one of {sorted(ROUTE_SCOPES)}")
    if (gateway_id is None) == (nat_gateway_id is None):
        raise ValueError("Exactly one of gateway_id or nat_gateway_id is required for the default route")
    tags = tags or {}
    table_name = f"{name}-rtb-{scope}-1"

    route_table = aws.ec2.RouteTable(
        table_name,
        vpc_id=vpc_id,
        routes=[aws.ec2.RouteTableRouteArgs(
            cidr_block="0.0.0.0/0",
            gateway_id=gateway_id,
            nat_gateway_id=nat_gateway_id,
        )],
        tags={
            **tags,
            "Name": table_name,
        }
    )

    kind = ROUTE_SCOPES[scope]
    associations = []
    for i, subnet_id in enumerate(subnet_ids):
        association = aws.ec2.RouteTableAssociation(
            f"{name}-rtb-assoc-{kind}-{i+1}",
            subnet_id=subnet_id,
            route_table_id=route_table.id
        )
        associations.append(association)

    return {
        "route_table": route_table,
        "associations": associations,
        "route_table_id": route_table.id
    }


def create_cluster_security_group(name: str, vpc_id: pulumi.Output[str], ingress_ports: List[int] = None,
                                  ingress_cidrs: List[str] = None, tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Create security group used to connect to the cluster

    Args:
        name: Resource name prefix
        vpc_id: VPC ID
        ingress_ports: TCP ports opened for ingress
        ingress_cidrs: Source CIDRs for ingress
        tags: Additional tags

    Returns:
        Dict with security group resource and outputs
    """
    tags = tags or {}
    ingress_ports = [80] if ingress_ports is None else ingress_ports
    ingress_cidrs = ingress_cidrs or ["0.0.0.0/0"]

    security_group = aws.ec2.SecurityGroup(
        f"{name}-cluster-sg",
        vpc_id=vpc_id,
        egress=[aws.ec2.SecurityGroupEgressArgs(
            protocol="-1",
            from_port=0,
            to_port=0,
            cidr_blocks=["0.0.0.0/0"],
        )],
        ingress=[
            aws.ec2.SecurityGroupIngressArgs(
                protocol="tcp",
                from_port=port,
                to_port=port,
                cidr_blocks=ingress_cidrs,
            )
            for port in ingress_ports
        ],
        tags={
            **tags,
            "Name": f"{name}-cluster-sg",
        }
    )

    return {
        "security_group": security_group,
        "security_group_id": security_group.id
    }


def create_vpc_resources(name: str, vpc_cidr: str, availability_zones: List[str],
                         private_subnet_cidrs: List[str], public_subnet_cidrs: List[str],
                         instance_tenancy: str = "default", enable_dns_hostnames: bool = True,
                         cluster_ingress_ports: List[int] = None, tags: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Create complete network topology for EKS

    Private subnets route to the internet through a single NAT gateway in the
    first public subnet; public subnets route through the internet gateway.

    Returns:
        Dict with all VPC resources and outputs
    """
    tags = tags or {}

    pulumi.log.info(
        f"Declaring VPC {vpc_cidr} with {len(private_subnet_cidrs)} private and "
        f"{len(public_subnet_cidrs)} public subnets across {availability_zones}"
    )

    vpc_result = create_vpc(name, vpc_cidr, instance_tenancy, enable_dns_hostnames, tags)

    private_result = create_subnets(
        name, vpc_result["vpc_id"], "priv", private_subnet_cidrs, availability_zones, tags
    )
    public_result = create_subnets(
        name, vpc_result["vpc_id"], "pub", public_subnet_cidrs, availability_zones, tags
    )

    nat_result = create_nat_gateway(name, public_result["subnet_ids"][0], tags)

    igw_result = create_internet_gateway(name, vpc_result["vpc_id"], tags)

    private_rt_result = create_route_table(
        name,
        vpc_result["vpc_id"],
        "private",
        private_result["subnet_ids"],
        nat_gateway_id=nat_result["nat_gateway_id"],
        tags=tags
    )
    public_rt_result = create_route_table(
        name,
        vpc_result["vpc_id"],
        "public",
        public_result["subnet_ids"],
        gateway_id=igw_result["igw_id"],
        tags=tags
    )

    sg_result = create_cluster_security_group(
        name, vpc_result["vpc_id"], cluster_ingress_ports, tags=tags
    )

    return {
        "vpc_id": vpc_result["vpc_id"],
        "vpc_cidr_block": vpc_result["vpc_cidr_block"],
        "private_subnet_ids": private_result["subnet_ids"],
        "public_subnet_ids": public_result["subnet_ids"],
        "availability_zones": private_result["availability_zones"],
        "nat_gateway_id": nat_result["nat_gateway_id"],
        "nat_gateway_public_ip": nat_result["public_ip"],
        "cluster_security_group_id": sg_result["security_group_id"],
        # Keep references to all resources for dependencies
        "_vpc": vpc_result["vpc"],
        "_private_subnets": private_result["subnets"],
        "_public_subnets": public_result["subnets"],
        "_eip": nat_result["eip"],
        "_nat_gateway": nat_result["nat_gateway"],
        "_igw": igw_result["igw"],
        "_private_route_table": private_rt_result["route_table"],
        "_public_route_table": public_rt_result["route_table"],
        "_route_table_associations": private_rt_result["associations"] + public_rt_result["associations"],
        "_cluster_sg": sg_result["security_group"]
    }
