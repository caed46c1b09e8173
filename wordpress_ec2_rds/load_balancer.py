import logging
from dataclasses import dataclass

from aws_cdk import (
    CfnOutput,
    aws_elasticloadbalancingv2 as elbv2,
)
from constructs import Construct

from wordpress_ec2_rds.network import NetworkHandle, Reachability

logger = logging.getLogger(__name__)

HTTP_PORT = 80


@dataclass(frozen=True)
class LoadBalancerHandle:
    dns_name: str
    listener: elbv2.ApplicationListener


class WordpressLoadBalancer(Construct):
    """
    Internet-facing Application Load Balancer for the WordPress site.

    Exposes the DNS name (needed to install WordPress) and the HTTP listener
    that the compute group is attached to later.
    """

    def __init__(self, scope: Construct, construct_id: str, *, prefix: str, network: NetworkHandle) -> None:
        super().__init__(scope, construct_id)

        alb = elbv2.ApplicationLoadBalancer(
            self, "Alb",
            load_balancer_name=f"{prefix}-alb",
            vpc=network.vpc,
            vpc_subnets=network.subnets(Reachability.PUBLIC),
            internet_facing=True,
        )

        # open=True lets 0.0.0.0/0 in on the listener port
        listener = alb.add_listener(
            "HttpListener",
            port=HTTP_PORT,
            open=True,
        )

        CfnOutput(
            self, "DnsName",
            value=alb.load_balancer_dns_name,
            description="Public DNS name of the WordPress load balancer",
        )
        logger.debug("Defined load balancer %s-alb listening on port %d", prefix, HTTP_PORT)

        self.handle = LoadBalancerHandle(
            dns_name=alb.load_balancer_dns_name,
            listener=listener,
        )
