import json
import logging
from dataclasses import dataclass

from aws_cdk import (
    Duration,
    RemovalPolicy,
    aws_ec2 as ec2,
    aws_rds as rds,
    aws_secretsmanager as secretsmanager,
)
from constructs import Construct

from wordpress_ec2_rds.config import DEFAULT_DB_PORT
from wordpress_ec2_rds.network import NetworkHandle, Reachability

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DatabaseHandle:
    instance: rds.DatabaseInstance
    secret_path: str
    port: int
    security_group: ec2.SecurityGroup


class MySqlDatabase(Construct):
    """
    MySQL database on RDS, placed in the isolated subnets of the VPC.

    The master credentials are generated by Secrets Manager and stored under
    ``secret_path``. Other constructs refer to them by that path only.

    Args:
        scope: Parent construct (usually the stack)
        construct_id: Identifier of this construct
        prefix: Project name used to namespace resource names
        network: Handle of the VPC to deploy into
        user: Master username stored in the secret
        secret_path: Secrets Manager name for the credentials
        port: Service port, 3306 when unset or 0
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        prefix: str,
        network: NetworkHandle,
        user: str,
        secret_path: str,
        port: int = DEFAULT_DB_PORT,
    ) -> None:
        super().__init__(scope, construct_id)
        port = port or DEFAULT_DB_PORT

        # ----------------------------------------------------------------------
        # Security Group - only resources inside the VPC reach the DB port
        # ----------------------------------------------------------------------
        ingress_security_group = ec2.SecurityGroup(
            self, "IngressSecurityGroup",
            vpc=network.vpc,
            security_group_name=f"{prefix}-rds-ingress-sg",
            description="MySQL access from inside the VPC",
        )
        ingress_security_group.add_ingress_rule(
            ec2.Peer.ipv4(network.cidr_block),
            ec2.Port.tcp(port),
            f"Allows only local resources inside VPC to access this MySQL port ({port})",
        )

        # ----------------------------------------------------------------------
        # Credentials Secret - password generated at deploy time
        # ----------------------------------------------------------------------
        credentials_secret = secretsmanager.Secret(
            self, "CredentialsSecret",
            secret_name=secret_path,
            description="Credentials to access Wordpress MySQL Database on RDS",
            generate_secret_string=secretsmanager.SecretStringGenerator(
                secret_string_template=json.dumps({"username": user}),
                generate_string_key="password",
                exclude_punctuation=True,
                include_space=False,
            ),
        )

        # ----------------------------------------------------------------------
        # RDS Instance
        # ----------------------------------------------------------------------
        instance = rds.DatabaseInstance(
            self, "Instance",
            credentials=rds.Credentials.from_secret(credentials_secret),
            engine=rds.DatabaseInstanceEngine.mysql(
                version=rds.MysqlEngineVersion.VER_8_0
            ),
            port=port,
            allocated_storage=20,                    # smallest size RDS MySQL accepts
            storage_type=rds.StorageType.GP2,
            backup_retention=Duration.days(3),
            instance_type=ec2.InstanceType.of(
                ec2.InstanceClass.BURSTABLE3,
                ec2.InstanceSize.MICRO,
            ),
            vpc=network.vpc,
            vpc_subnets=network.subnets(Reachability.ISOLATED),
            security_groups=[ingress_security_group],
            # a final snapshot is taken when the stack is destroyed
            removal_policy=RemovalPolicy.SNAPSHOT,
            deletion_protection=False,
        )
        logger.info("Defined MySQL instance on port %d, credentials at %s", port, secret_path)

        self.handle = DatabaseHandle(
            instance=instance,
            secret_path=secret_path,
            port=port,
            security_group=ingress_security_group,
        )
