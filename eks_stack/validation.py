"""
Configuration validation for the EKS stack
All problems are collected first, then raised together before any resource is declared
"""

import ipaddress
from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass
class ValidationErrorDetail:
    """A single configuration problem."""

    field: str
    message: str


class ConfigValidationError(Exception):
    """Exception raised when config validation fails."""

    def __init__(self, errors: List[ValidationErrorDetail]):
        self.errors = errors
        messages = [f"{e.field}: {e.message}" for e in errors]
        super().__init__(f"Configuration validation failed: {'; '.join(messages)}")


def is_valid_cidr(cidr: str) -> Tuple[bool, Optional[str]]:
    """Check if an IPv4 CIDR string is valid, with no host bits set.

    Returns (is_valid, error_message).
    """
    try:
        ipaddress.IPv4Network(cidr, strict=True)
        return True, None
    except ValueError as e:
        return False, str(e)


def cidrs_overlap(cidr1: str, cidr2: str) -> bool:
    """Check if two CIDR blocks overlap."""
    net1 = ipaddress.IPv4Network(cidr1, strict=False)
    net2 = ipaddress.IPv4Network(cidr2, strict=False)
    return net1.overlaps(net2)


def is_subnet_of(subnet_cidr: str, vpc_cidr: str) -> bool:
    """Check if subnet CIDR is within VPC CIDR range."""
    subnet = ipaddress.IPv4Network(subnet_cidr, strict=False)
    vpc = ipaddress.IPv4Network(vpc_cidr, strict=False)
    return subnet.subnet_of(vpc)


def _validate_network(config) -> List[ValidationErrorDetail]:
    errors = []

    vpc_ok, vpc_error = is_valid_cidr(config.vpc_cidr)
    if not vpc_ok:
        errors.append(ValidationErrorDetail("vpc_cidr", f"Invalid CIDR '{config.vpc_cidr}': {vpc_error}"))

    az_count = len(config.availability_zones)
    if az_count == 0:
        errors.append(ValidationErrorDetail("availability_zones", "At least one availability zone is required"))

    subnets = []
    for field_name, cidrs in (
        ("private_subnet_cidrs", config.private_subnet_cidrs),
        ("public_subnet_cidrs", config.public_subnet_cidrs),
    ):
        if len(cidrs) != az_count:
            errors.append(ValidationErrorDetail(
                field_name,
                f"Expected one subnet per availability zone ({az_count}), got {len(cidrs)}",
            ))
        for cidr in cidrs:
            ok, error = is_valid_cidr(cidr)
            if not ok:
                errors.append(ValidationErrorDetail(field_name, f"Invalid CIDR '{cidr}': {error}"))
                continue
            if vpc_ok and not is_subnet_of(cidr, config.vpc_cidr):
                errors.append(ValidationErrorDetail(
                    field_name, f"Subnet {cidr} is not within VPC CIDR {config.vpc_cidr}"
                ))
            subnets.append((field_name, cidr))

    for i, (field_name, cidr) in enumerate(subnets):
        for _, other in subnets[i + 1:]:
            if cidrs_overlap(cidr, other):
                errors.append(ValidationErrorDetail(field_name, f"Subnet {cidr} overlaps with {other}"))

    return errors


def _validate_cluster(config) -> List[ValidationErrorDetail]:
    errors = []

    for port in config.cluster_ingress_ports:
        if isinstance(port, bool) or not isinstance(port, int) or not 0 <= port <= 65535:
            errors.append(ValidationErrorDetail("cluster_ingress_ports", f"Invalid port: {port}"))

    if not config.public_access_cidrs:
        errors.append(ValidationErrorDetail("public_access_cidrs", "At least one CIDR is required"))
    for cidr in config.public_access_cidrs:
        ok, error = is_valid_cidr(cidr)
        if not ok:
            errors.append(ValidationErrorDetail("public_access_cidrs", f"Invalid CIDR '{cidr}': {error}"))

    return errors


def _validate_node_groups(config) -> List[ValidationErrorDetail]:
    errors = []

    if config.node_group_count < 1:
        errors.append(ValidationErrorDetail("node_group_count", "At least one node group is required"))

    if config.node_min_size < 1:
        errors.append(ValidationErrorDetail("node_min_size", "Must be at least 1"))
    if config.node_min_size > config.node_max_size:
        errors.append(ValidationErrorDetail(
            "node_min_size",
            f"min_size ({config.node_min_size}) cannot exceed max_size ({config.node_max_size})",
        ))
    if not config.node_min_size <= config.node_desired_size <= config.node_max_size:
        errors.append(ValidationErrorDetail(
            "node_desired_size",
            f"desired_size ({config.node_desired_size}) must be between "
            f"min_size ({config.node_min_size}) and max_size ({config.node_max_size})",
        ))

    return errors


def validate_config(config) -> None:
    """
    Validate stack configuration

    Args:
        config: Config instance (or any object exposing the same attributes)

    Raises:
        ConfigValidationError: with every problem found
    """
    errors = _validate_network(config) + _validate_cluster(config) + _validate_node_groups(config)
    if errors:
        raise ConfigValidationError(errors)
