import aws_cdk as core
import aws_cdk.assertions as assertions
from aws_cdk import aws_ec2 as ec2
from aws_cdk import aws_elasticloadbalancingv2 as elbv2

from wordpress_ec2_rds.database import MySqlDatabase
from wordpress_ec2_rds.load_balancer import WordpressLoadBalancer
from wordpress_ec2_rds.network import Reachability, WordpressVpc


def _network_stack():
    app = core.App()
    stack = core.Stack(app, "test")
    network = WordpressVpc(stack, "Network", prefix="test", cidr="10.0.0.0/16").handle
    return stack, network


def test_database_needs_only_the_network():
    stack, network = _network_stack()

    database = MySqlDatabase(
        stack, "Database",
        prefix="test",
        network=network,
        user="wordpress_admin",
        secret_path="test/rds/mysql/credentials",
        port=0,
    )

    assert database.handle.port == 3306
    assert database.handle.secret_path == "test/rds/mysql/credentials"
    template = assertions.Template.from_stack(stack)
    template.resource_count_is("AWS::RDS::DBInstance", 1)
    template.resource_count_is("AWS::ElasticLoadBalancingV2::LoadBalancer", 0)


def test_load_balancer_needs_only_the_network():
    stack, network = _network_stack()

    load_balancer = WordpressLoadBalancer(stack, "LoadBalancer", prefix="test", network=network)
    # a listener needs a default action before it synthesizes
    load_balancer.handle.listener.add_action(
        "Default",
        action=elbv2.ListenerAction.fixed_response(200),
    )

    assert load_balancer.handle.dns_name
    template = assertions.Template.from_stack(stack)
    template.resource_count_is("AWS::ElasticLoadBalancingV2::LoadBalancer", 1)
    template.resource_count_is("AWS::RDS::DBInstance", 0)
    template.has_resource_properties("AWS::EC2::SecurityGroup", {
        "SecurityGroupIngress": [
            assertions.Match.object_like({"CidrIp": "0.0.0.0/0", "FromPort": 80, "ToPort": 80}),
        ],
    })


def test_custom_database_port():
    stack, network = _network_stack()

    MySqlDatabase(
        stack, "Database",
        prefix="test",
        network=network,
        user="wordpress_admin",
        secret_path="test/rds/mysql/credentials",
        port=3307,
    )

    template = assertions.Template.from_stack(stack)
    template.has_resource_properties("AWS::EC2::SecurityGroup", {
        "GroupName": "test-rds-ingress-sg",
        "SecurityGroupIngress": [
            assertions.Match.object_like({"FromPort": 3307, "ToPort": 3307}),
        ],
    })


def test_subnet_selection_by_reachability():
    _, network = _network_stack()

    assert network.subnets(Reachability.PUBLIC).subnet_type == ec2.SubnetType.PUBLIC
    assert network.subnets(Reachability.ISOLATED).subnet_type == ec2.SubnetType.PRIVATE_ISOLATED
