#!/usr/bin/env python3
import logging

import aws_cdk as cdk

from wordpress_ec2_rds.config import StackConfig
from wordpress_ec2_rds.wordpress_ec2_rds_stack import WordpressEc2RdsStack

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# ------------------------------------------------------------------------------
# Configuration
# ------------------------------------------------------------------------------
config = StackConfig.from_env()
"""
Reads deployment settings from the environment (and a .env file, if present)
exactly once. The resulting value is immutable and passed explicitly to the
stack; nothing else reads the environment.

Variables (all optional):
- AWS_ACCOUNT_NUMBER, AWS_REGION (us-west-2)
- STAGE (dev): feeds the project name wordpress-ec2-rds-<stage>
- DEPLOYED_BY (falls back to USER)
- WP_ADMIN_USER, WP_ADMIN_EMAIL, WP_DB_NAME, WP_SITE_TITLE, WP_SITE_INSTALL_PATH
- VPC_CIDR, DB_USER, DB_PORT, BOOTSTRAP_SCRIPT_PATH
"""

# Initialize the CDK Application
app = cdk.App()

# ------------------------------------------------------------------------------
# WordPress Stack
# ------------------------------------------------------------------------------
WordpressEc2RdsStack(
    app, "WordpressEc2RdsStack",
    config=config,
    env=config.env,
)
"""
Components:
- VPC with public and isolated subnets in two AZs, no NAT gateway
- RDS MySQL instance in the isolated subnets, credentials in Secrets Manager
- Internet-facing Application Load Balancer (HTTP :80)
- One WordPress EC2 instance in an Auto Scaling group, registered with the ALB

Stack Outputs:
- The load balancer's DNS name (the site URL)
"""

app.synth()
"""
After synthesis, deploy with `cdk deploy WordpressEc2RdsStack` and tear down
with `cdk destroy WordpressEc2RdsStack` (the database is snapshotted first).
"""
