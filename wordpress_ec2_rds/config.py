import ipaddress
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

import aws_cdk as cdk
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_BOOTSTRAP_SCRIPT = str(Path(__file__).parent / "scripts" / "wordpress_install.sh")
DEFAULT_DB_PORT = 3306


class ConfigurationError(ValueError):
    """Raised when a configuration value cannot be used to build the stack."""


@dataclass(frozen=True)
class StackConfig:
    """
    Deployment settings for the WordPress stack.

    Built once (usually with :meth:`from_env`) and handed to every construct
    that needs it. Instances are immutable.
    """

    account: Optional[str] = None
    region: str = "us-west-2"
    stage: str = "dev"
    deployed_by: str = "github.actions.bot"
    admin_username: str = "admin"
    admin_email: str = "admin@whatever.com"
    database_name: str = "awesome_wp_site_db"
    site_title: str = "awesome-wp-site"
    install_path: str = "/var/www/html/"
    vpc_cidr: str = "172.22.0.0/16"
    db_user: str = "wordpress_admin"
    db_port: int = DEFAULT_DB_PORT
    bootstrap_script_path: str = field(default=DEFAULT_BOOTSTRAP_SCRIPT)

    def __post_init__(self) -> None:
        try:
            network = ipaddress.ip_network(self.vpc_cidr)
        except ValueError as e:
            raise ConfigurationError(f"Invalid VPC CIDR block {self.vpc_cidr!r}: {e}") from e
        if network.version != 4:
            raise ConfigurationError(f"VPC CIDR block must be IPv4, got {self.vpc_cidr!r}")

        # 0 means "use the engine default"
        if not self.db_port:
            object.__setattr__(self, "db_port", DEFAULT_DB_PORT)
        if not 0 < self.db_port < 65536:
            raise ConfigurationError(f"Database port out of range: {self.db_port}")

    @property
    def project_name(self) -> str:
        return f"wordpress-ec2-rds-{self.stage}"

    @property
    def db_secret_path(self) -> str:
        return f"{self.project_name}/rds/mysql/credentials"

    @property
    def admin_secret_path(self) -> str:
        return f"{self.project_name}/wordpress/admin/credentials"

    @property
    def env(self) -> cdk.Environment:
        return cdk.Environment(account=self.account, region=self.region)

    @property
    def tags(self) -> Dict[str, str]:
        return {"Project": self.project_name, "Deployedby": self.deployed_by}

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        dotenv_path: Optional[str] = None,
    ) -> "StackConfig":
        """
        Build the configuration from environment variables.

        When ``environ`` is not given, a ``.env`` file is loaded first (without
        overriding variables that are already set) and ``os.environ`` is read.

        Raises:
            ConfigurationError: If a value is malformed.
        """
        if environ is None:
            load_dotenv(dotenv_path=dotenv_path)
            environ = os.environ

        raw_port = environ.get("DB_PORT") or str(DEFAULT_DB_PORT)
        try:
            db_port = int(raw_port)
        except ValueError as e:
            raise ConfigurationError(f"DB_PORT must be an integer, got {raw_port!r}") from e

        config = cls(
            account=environ.get("AWS_ACCOUNT_NUMBER") or None,
            region=environ.get("AWS_REGION") or cls.region,
            stage=environ.get("STAGE") or cls.stage,
            deployed_by=(
                environ.get("DEPLOYED_BY") or environ.get("USER") or cls.deployed_by
            ),
            admin_username=environ.get("WP_ADMIN_USER") or cls.admin_username,
            admin_email=environ.get("WP_ADMIN_EMAIL") or cls.admin_email,
            database_name=environ.get("WP_DB_NAME") or cls.database_name,
            site_title=environ.get("WP_SITE_TITLE") or cls.site_title,
            install_path=environ.get("WP_SITE_INSTALL_PATH") or cls.install_path,
            vpc_cidr=environ.get("VPC_CIDR") or cls.vpc_cidr,
            db_user=environ.get("DB_USER") or cls.db_user,
            db_port=db_port,
            bootstrap_script_path=(
                environ.get("BOOTSTRAP_SCRIPT_PATH") or DEFAULT_BOOTSTRAP_SCRIPT
            ),
        )
        logger.info(
            "Loaded configuration for %s (region=%s, account=%s)",
            config.project_name, config.region, config.account or "<env-agnostic>",
        )
        return config
