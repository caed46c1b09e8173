import logging

from aws_cdk import (
    Stack,
    Tags,
)
from constructs import Construct

from wordpress_ec2_rds.compute import WordpressInstance
from wordpress_ec2_rds.config import StackConfig
from wordpress_ec2_rds.database import MySqlDatabase
from wordpress_ec2_rds.load_balancer import HTTP_PORT, WordpressLoadBalancer
from wordpress_ec2_rds.network import WordpressVpc

logger = logging.getLogger(__name__)

STACK_DESCRIPTION = "Deploys an ALB-fronted Wordpress EC2 instance backed by RDS MySQL"


class WordpressEc2RdsStack(Stack):
    """
    AWS CDK Stack for a WordPress site on EC2 backed by MySQL on RDS.

    Architecture:
    [Internet] → [ALB (public subnets)] → [EC2 in ASG (public subnets)] → [RDS MySQL (isolated subnets)]

    Build order follows the data each construct needs:
    1. VPC
    2. RDS database and load balancer (independent of each other)
    3. WordPress instance (needs the ALB DNS name and both secret paths)
    4. Listener target registration (needs the listener and the instance group)
    """

    def __init__(self, scope: Construct, construct_id: str, *, config: StackConfig, **kwargs) -> None:
        """
        Initialize the WordPress stack.

        Args:
            scope: The parent construct (usually the app)
            construct_id: The unique identifier for this stack
            config: Deployment settings, see :class:`StackConfig`
            **kwargs: Additional arguments passed to the Stack base class
        """
        kwargs.setdefault("description", STACK_DESCRIPTION)
        super().__init__(scope, construct_id, **kwargs)
        prefix = config.project_name

        # ----------------------------------------------------------------------
        # Network
        # ----------------------------------------------------------------------
        network = WordpressVpc(
            self, "Network",
            prefix=prefix,
            cidr=config.vpc_cidr,
        ).handle

        # ----------------------------------------------------------------------
        # Database and Load Balancer
        # ----------------------------------------------------------------------
        database = MySqlDatabase(
            self, "Database",
            prefix=prefix,
            network=network,
            user=config.db_user,
            port=config.db_port,
            secret_path=config.db_secret_path,
        )
        load_balancer = WordpressLoadBalancer(
            self, "LoadBalancer",
            prefix=prefix,
            network=network,
        ).handle

        # ----------------------------------------------------------------------
        # WordPress Instance
        # ----------------------------------------------------------------------
        compute = WordpressInstance(
            self, "Wordpress",
            prefix=prefix,
            network=network,
            load_balancer=load_balancer,
            db_secret_path=database.handle.secret_path,
            admin_secret_path=config.admin_secret_path,
            config=config,
        )
        # The install script connects to the database on first boot
        compute.node.add_dependency(database)

        # ----------------------------------------------------------------------
        # Register the instance group behind the listener
        # ----------------------------------------------------------------------
        target_group = load_balancer.listener.add_targets(
            "WordpressTargets",
            port=HTTP_PORT,
            targets=[compute.handle.group],
        )

        for key, value in config.tags.items():
            Tags.of(self).add(key, value)

        logger.info("Composed stack %s for %s", construct_id, prefix)

        self.output_props = {
            "network": network,
            "database": database.handle,
            "load_balancer": load_balancer,
            "compute": compute.handle,
            "target_group": target_group,
        }

    @property
    def outputs(self):
        """
        Property accessor for stack outputs.

        Returns:
            Dict: Handles of every resource group in the stack
        """
        return self.output_props
