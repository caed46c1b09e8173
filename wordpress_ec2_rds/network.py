import enum
import logging
from dataclasses import dataclass

from aws_cdk import aws_ec2 as ec2
from constructs import Construct

logger = logging.getLogger(__name__)


class Reachability(enum.Enum):
    """Reachability class of a subnet group."""

    PUBLIC = ec2.SubnetType.PUBLIC            # routed to the internet gateway
    ISOLATED = ec2.SubnetType.PRIVATE_ISOLATED  # no route in or out of the VPC


@dataclass(frozen=True)
class NetworkHandle:
    vpc: ec2.IVpc
    cidr_block: str

    def subnets(self, reachability: Reachability) -> ec2.SubnetSelection:
        return ec2.SubnetSelection(subnet_type=reachability.value)


class WordpressVpc(Construct):
    """
    Custom VPC split into public and isolated subnets across two AZs.

    No NAT gateway is created: nothing placed in the isolated subnets needs
    outbound internet access.
    """

    def __init__(self, scope: Construct, construct_id: str, *, prefix: str, cidr: str) -> None:
        super().__init__(scope, construct_id)

        vpc = ec2.Vpc(
            self, "Vpc",
            vpc_name=f"{prefix}-vpc",
            ip_addresses=ec2.IpAddresses.cidr(cidr),  # e.g. "172.22.0.0/16"
            max_azs=2,                                # RDS requires at least 2
            enable_dns_hostnames=True,
            enable_dns_support=True,
            nat_gateways=0,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name="public",
                    subnet_type=Reachability.PUBLIC.value,
                    cidr_mask=22,
                ),
                ec2.SubnetConfiguration(
                    name="isolated",
                    subnet_type=Reachability.ISOLATED.value,
                    cidr_mask=22,
                ),
            ],
        )
        logger.debug("Defined VPC %s-vpc with CIDR %s", prefix, cidr)

        self.handle = NetworkHandle(vpc=vpc, cidr_block=vpc.vpc_cidr_block)
