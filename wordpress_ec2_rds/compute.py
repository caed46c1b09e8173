import json
import logging
from dataclasses import dataclass
from typing import Dict, List

from aws_cdk import (
    aws_autoscaling as autoscaling,
    aws_ec2 as ec2,
    aws_iam as iam,
    aws_secretsmanager as secretsmanager,
)
from constructs import Construct

from wordpress_ec2_rds.config import StackConfig
from wordpress_ec2_rds.load_balancer import HTTP_PORT, LoadBalancerHandle
from wordpress_ec2_rds.network import NetworkHandle, Reachability
from wordpress_ec2_rds.utils import load_template, replace_all_substrings

logger = logging.getLogger(__name__)

# The group is a supervised singleton: it replaces the instance when it
# fails, it never scales.
INSTANCE_COUNT = 1


@dataclass(frozen=True)
class ComputeHandle:
    group: autoscaling.AutoScalingGroup
    role: iam.Role
    bootstrap_script: str
    admin_secret_path: str


def bootstrap_tokens(
    config: StackConfig,
    *,
    db_secret_path: str,
    admin_secret_path: str,
    site_domain: str,
) -> List[Dict[str, str]]:
    """Placeholder substitutions for the install script, in application order."""
    return [
        {"_DB_SECRETS_PATH_": db_secret_path},
        {"_WP_SECRETS_PATH_": admin_secret_path},
        {"_AWS_REGION_": config.region},
        {"_WP_DB_NAME_": config.database_name},
        {"_WP_SITE_TITLE_": config.site_title},
        {"_WP_SITE_INSTALL_PATH_": config.install_path},
        {"_WP_SITE_BASE_DOMAIN_": site_domain},
    ]


def render_bootstrap_script(config: StackConfig, **tokens: str) -> str:
    """
    Read the install script template and fill in its placeholders.

    Keyword arguments are those of :func:`bootstrap_tokens`. An unreadable
    template raises ``OSError``.
    """
    template = load_template(config.bootstrap_script_path)
    return replace_all_substrings(bootstrap_tokens(config, **tokens), template)


class WordpressInstance(Construct):
    """
    Single WordPress EC2 instance kept alive by an Auto Scaling group.

    The instance bootstraps itself with the rendered install script, which
    reads both credential secrets from Secrets Manager and installs WordPress
    under the load balancer's DNS name.

    Args:
        scope: Parent construct (usually the stack)
        construct_id: Identifier of this construct
        prefix: Project name used to namespace resource names
        network: Handle of the VPC to deploy into
        load_balancer: Handle of the load balancer serving the site
        db_secret_path: Secrets Manager name of the database credentials
        admin_secret_path: Secrets Manager name for the WordPress admin credentials
        config: Deployment settings
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        prefix: str,
        network: NetworkHandle,
        load_balancer: LoadBalancerHandle,
        db_secret_path: str,
        admin_secret_path: str,
        config: StackConfig,
    ) -> None:
        super().__init__(scope, construct_id)

        # ----------------------------------------------------------------------
        # Bootstrap Script
        # ----------------------------------------------------------------------
        bootstrap_script = render_bootstrap_script(
            config,
            db_secret_path=db_secret_path,
            admin_secret_path=admin_secret_path,
            site_domain=load_balancer.dns_name,
        )

        # ----------------------------------------------------------------------
        # IAM Role for the Instance
        # ----------------------------------------------------------------------
        role = iam.Role(
            self, "InstanceRole",
            assumed_by=iam.CompositePrincipal(
                iam.ServicePrincipal("ec2.amazonaws.com"),
                iam.ServicePrincipal("ssm.amazonaws.com"),
            ),
            description="Execution role for the WordPress instance",
            managed_policies=[
                # SSM Session Manager access instead of SSH keys
                iam.ManagedPolicy.from_aws_managed_policy_name(
                    "AmazonSSMManagedInstanceCore"
                ),
            ],
        )

        # ----------------------------------------------------------------------
        # WordPress Admin Secret
        # ----------------------------------------------------------------------
        admin_secret = secretsmanager.Secret(
            self, "AdminSecret",
            secret_name=admin_secret_path,
            description="Admin credentials to access Wordpress",
            generate_secret_string=secretsmanager.SecretStringGenerator(
                secret_string_template=json.dumps({
                    "username": config.admin_username,
                    "email": config.admin_email,
                }),
                generate_string_key="password",
            ),
        )

        # Secrets Manager access is limited to the two secrets the script uses
        db_secret = secretsmanager.Secret.from_secret_name_v2(
            self, "DbSecretRef", db_secret_path
        )
        for secret in (db_secret, admin_secret):
            secret.grant_read(role)
            secret.grant_write(role)

        # ----------------------------------------------------------------------
        # Security Group - HTTP from inside the VPC (the ALB)
        # ----------------------------------------------------------------------
        security_group = ec2.SecurityGroup(
            self, "InstancesSecurityGroup",
            vpc=network.vpc,
            allow_all_outbound=True,
            security_group_name=f"{prefix}-instances-sg",
            description="WordPress instances",
        )
        security_group.add_ingress_rule(
            ec2.Peer.ipv4(network.cidr_block),
            ec2.Port.tcp(HTTP_PORT),
            "Allows HTTP access from resources inside our VPC (like the ALB)",
        )

        # ----------------------------------------------------------------------
        # Auto Scaling Group pinned to one instance
        # ----------------------------------------------------------------------
        group = autoscaling.AutoScalingGroup(
            self, "Asg",
            vpc=network.vpc,
            vpc_subnets=network.subnets(Reachability.PUBLIC),
            role=role,
            security_group=security_group,
            instance_type=ec2.InstanceType.of(
                ec2.InstanceClass.T2,
                ec2.InstanceSize.MICRO,
            ),
            machine_image=ec2.MachineImage.latest_amazon_linux2(),
            user_data=ec2.UserData.custom(bootstrap_script),
            min_capacity=INSTANCE_COUNT,
            max_capacity=INSTANCE_COUNT,
            associate_public_ip_address=True,
        )
        logger.info(
            "Defined WordPress instance group, admin credentials at %s", admin_secret_path
        )

        self.handle = ComputeHandle(
            group=group,
            role=role,
            bootstrap_script=bootstrap_script,
            admin_secret_path=admin_secret_path,
        )
