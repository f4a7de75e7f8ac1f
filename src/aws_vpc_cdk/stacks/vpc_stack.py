"""VPC Stack with one private and one public subnet per availability zone.

The base CIDR is partitioned up front; every subnet, NAT gateway and route
table is then declared from the partition result, keyed by zone index.
Public subnets share one route table to the internet gateway; each private
subnet gets its own route table to the NAT gateway in the same zone.
"""
from typing import Optional

from aws_cdk import CfnOutput, RemovalPolicy, Stack, Tags
from aws_cdk import aws_ec2 as ec2
from aws_cdk import aws_iam as iam
from aws_cdk import aws_logs as logs
from aws_cdk import aws_route53 as route53
from constructs import Construct

from ..config import VpcConfig
from ..exceptions import ConfigurationError, ValidationError
from ..logger import get_logger
from ..pipeline import PipelineResult, ProvisioningPipeline
from ..project_settings import (
    DEFAULT_ROUTE_CIDR,
    FLOW_LOG_TRAFFIC_TYPES,
    merge_tags,
    resource_name,
    to_cfn_tags,
)
from ..subnets import PartitionResult, ZoneSubnets, partition

logger = get_logger(__name__)

FLOW_LOG_ACTIONS = [
    "logs:CreateLogGroup",
    "logs:CreateLogStream",
    "logs:PutLogEvents",
    "logs:DescribeLogGroups",
    "logs:DescribeLogStreams",
]


class VPCStack(Stack):
    """VPC, subnets, routing, NAT gateways and optional DNS, endpoints, flow logs."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: dict,
        **kwargs,
    ) -> None:
        """Initialize VPC Stack.

        Args:
            scope: CDK app or parent stack
            construct_id: Unique identifier for this stack
            config: Environment configuration dict from config.yaml
            **kwargs: Additional stack properties

        Raises:
            InvalidAddressError: If the base CIDR does not parse
            CapacityError: If the base CIDR is too small for the zones
            ConfigurationError: If the flow log retention is unknown
        """
        super().__init__(scope, construct_id, **kwargs)

        self.vpc_config = VpcConfig.model_validate(config["vpc"])
        self.env_name = config["tags"]["Environment"]
        self.description = self.vpc_config.description

        self.subnet_partition: Optional[PartitionResult] = None
        self.private_subnets: list[ec2.CfnSubnet] = []
        self.public_subnets: list[ec2.CfnSubnet] = []
        self.private_route_tables: list[ec2.CfnRouteTable] = []
        self.nat_gateways: list[ec2.CfnNatGateway] = []
        self.endpoints: dict[str, ec2.CfnVPCEndpoint] = {}
        self.private_zone: Optional[route53.CfnHostedZone] = None
        self.flow_log: Optional[ec2.CfnFlowLog] = None

        endpoints = self.vpc_config.endpoints
        flow_logs = self.vpc_config.flow_logs
        pipeline = (
            ProvisioningPipeline(construct_id)
            .add("partition_subnets", self._partition_subnets)
            .add("vpc", self._create_vpc)
            .add("internet_gateway", self._create_internet_gateway)
            .add("private_zone", self._create_private_zone, enabled=self.vpc_config.zone_name is not None)
            .add("subnets", self._create_subnets)
            .add("public_routing", self._create_public_routing)
            .add("private_routing", self._create_private_routing)
            .add("endpoints", self._create_endpoints, enabled=endpoints.any_enabled)
            .add(
                "flow_logs",
                lambda: self.enable_flow_logging_to_cloudwatch_logs(
                    flow_logs.traffic_type, flow_logs.retention
                ),
                enabled=flow_logs.enabled,
            )
            .add("outputs", self._create_outputs)
        )
        self.pipeline_result: PipelineResult = pipeline.run()

    def _tags(self, name: str) -> list:
        return to_cfn_tags(merge_tags(self.vpc_config.base_tags, {"Name": name}))

    def _partition_subnets(self) -> None:
        zones = self.vpc_config.availability_zones
        self.subnet_partition = partition(self.vpc_config.base_cidr, len(zones))
        logger.info(
            "subnets_partitioned",
            stack=self.node.id,
            base_cidr=str(self.subnet_partition.base),
            zone_count=self.subnet_partition.zone_count,
            subnet_prefix_length=self.subnet_partition.subnet_prefix_length,
            reserved_tiles=self.subnet_partition.reserved_tiles,
        )

    def _create_vpc(self) -> None:
        self.vpc = ec2.CfnVPC(
            self,
            "VPC",
            cidr_block=str(self.subnet_partition.base),
            enable_dns_support=True,
            enable_dns_hostnames=True,
            tags=self._tags(f"{self.description} VPC"),
        )
        self.vpc_id = self.vpc.ref
        self.vpc_arn = self.format_arn(service="ec2", resource="vpc", resource_name=self.vpc.ref)

    def _create_internet_gateway(self) -> None:
        self.internet_gateway = ec2.CfnInternetGateway(
            self,
            "InternetGateway",
            tags=self._tags(f"{self.description} VPC Internet Gateway"),
        )
        self.internet_gateway_attachment = ec2.CfnVPCGatewayAttachment(
            self,
            "InternetGatewayAttachment",
            vpc_id=self.vpc.ref,
            internet_gateway_id=self.internet_gateway.ref,
        )

    def _create_private_zone(self) -> None:
        zone_name = self.vpc_config.zone_name
        self.private_zone = route53.CfnHostedZone(
            self,
            "PrivateZone",
            name=zone_name,
            hosted_zone_config=route53.CfnHostedZone.HostedZoneConfigProperty(
                comment=f"Private zone for {zone_name}. Managed by CDK",
            ),
            vpcs=[
                route53.CfnHostedZone.VPCProperty(vpc_id=self.vpc.ref, vpc_region=self.region)
            ],
        )

        # DHCP options make instances resolve names in the private zone
        self.dhcp_options = ec2.CfnDHCPOptions(
            self,
            "DhcpOptions",
            domain_name=zone_name,
            domain_name_servers=["AmazonProvidedDNS"],
            tags=self._tags(f"{self.description} DHCP Options"),
        )
        ec2.CfnVPCDHCPOptionsAssociation(
            self,
            "DhcpOptionsAssociation",
            vpc_id=self.vpc.ref,
            dhcp_options_id=self.dhcp_options.ref,
        )

    def _create_subnets(self) -> None:
        zones = self.vpc_config.availability_zones
        for zone in self.subnet_partition.zones:
            self.private_subnets.append(self._create_subnet(zone, zones[zone.zone_index], public=False))
            self.public_subnets.append(self._create_subnet(zone, zones[zone.zone_index], public=True))

    def _create_subnet(self, zone: ZoneSubnets, availability_zone: str, public: bool) -> ec2.CfnSubnet:
        role = "Public" if public else "Private"
        block = zone.public if public else zone.private
        return ec2.CfnSubnet(
            self,
            f"{role}Subnet{zone.zone_index + 1}",
            vpc_id=self.vpc.ref,
            cidr_block=str(block),
            availability_zone=availability_zone,
            map_public_ip_on_launch=public or None,
            tags=self._tags(f"{self.description} {role} {zone.zone_index}"),
        )

    def _create_public_routing(self) -> None:
        self.public_route_table = ec2.CfnRouteTable(
            self,
            "PublicRouteTable",
            vpc_id=self.vpc.ref,
            tags=self._tags(f"{self.description} Public Route Table"),
        )
        route = ec2.CfnRoute(
            self,
            "PublicDefaultRoute",
            route_table_id=self.public_route_table.ref,
            destination_cidr_block=DEFAULT_ROUTE_CIDR,
            gateway_id=self.internet_gateway.ref,
        )
        # The route is rejected until the gateway is attached
        route.add_dependency(self.internet_gateway_attachment)

        for index, subnet in enumerate(self.public_subnets):
            ec2.CfnSubnetRouteTableAssociation(
                self,
                f"PublicRouteTableAssociation{index + 1}",
                route_table_id=self.public_route_table.ref,
                subnet_id=subnet.ref,
            )

    def _create_private_routing(self) -> None:
        for zone in self.subnet_partition.zones:
            index = zone.zone_index
            ordinal = index + 1

            elastic_ip = ec2.CfnEIP(
                self,
                f"NatGatewayEip{ordinal}",
                domain="vpc",
                tags=self._tags(f"{self.description} NAT Gateway EIP {index}"),
            )
            elastic_ip.add_dependency(self.internet_gateway_attachment)

            nat_gateway = ec2.CfnNatGateway(
                self,
                f"NatGateway{ordinal}",
                allocation_id=elastic_ip.attr_allocation_id,
                subnet_id=self.public_subnets[index].ref,
                tags=self._tags(f"{self.description} NAT Gateway {index}"),
            )
            self.nat_gateways.append(nat_gateway)

            route_table = ec2.CfnRouteTable(
                self,
                f"PrivateRouteTable{ordinal}",
                vpc_id=self.vpc.ref,
                tags=self._tags(f"{self.description} Private Subnet RT {index}"),
            )
            self.private_route_tables.append(route_table)

            ec2.CfnRoute(
                self,
                f"PrivateDefaultRoute{ordinal}",
                route_table_id=route_table.ref,
                destination_cidr_block=DEFAULT_ROUTE_CIDR,
                nat_gateway_id=nat_gateway.ref,
            )
            ec2.CfnSubnetRouteTableAssociation(
                self,
                f"PrivateRouteTableAssociation{ordinal}",
                route_table_id=route_table.ref,
                subnet_id=self.private_subnets[index].ref,
            )

    def _create_endpoints(self) -> None:
        endpoints = self.vpc_config.endpoints
        route_table_ids = [self.public_route_table.ref] + [
            route_table.ref for route_table in self.private_route_tables
        ]
        services = {"s3": ("S3Endpoint", endpoints.s3), "dynamodb": ("DynamoDbEndpoint", endpoints.dynamodb)}

        for service, (construct_id, enabled) in services.items():
            if not enabled:
                continue
            self.endpoints[service] = ec2.CfnVPCEndpoint(
                self,
                construct_id,
                vpc_id=self.vpc.ref,
                service_name=f"com.amazonaws.{self.region}.{service}",
                vpc_endpoint_type="Gateway",
                route_table_ids=route_table_ids,
            )

    def enable_flow_logging_to_cloudwatch_logs(
        self,
        traffic_type: str = "ALL",
        retention: str = "ONE_WEEK",
    ) -> ec2.CfnFlowLog:
        """Send VPC flow logs to a new CloudWatch Logs group.

        Args:
            traffic_type: ALL, ACCEPT or REJECT
            retention: Member name of ``aws_logs.RetentionDays``

        Returns:
            The flow log resource

        Raises:
            ValidationError: If the traffic type is not supported
            ConfigurationError: If flow logging is already enabled or the
                retention is unknown
        """
        if traffic_type not in FLOW_LOG_TRAFFIC_TYPES:
            raise ValidationError(
                "Unsupported flow log traffic type",
                traffic_type=traffic_type,
                allowed=",".join(FLOW_LOG_TRAFFIC_TYPES),
            )
        if self.flow_log is not None:
            raise ConfigurationError("Flow logging is already enabled", stack=self.node.id)
        try:
            retention_days = logs.RetentionDays[retention]
        except KeyError:
            raise ConfigurationError("Unknown log retention", retention=retention) from None

        role = iam.Role(
            self,
            "FlowLogsRole",
            assumed_by=iam.ServicePrincipal("vpc-flow-logs.amazonaws.com"),
            description=f"{self.node.id} VPC Flow Logs",
        )

        log_group = logs.LogGroup(
            self,
            "FlowLogsLogGroup",
            log_group_name=resource_name(self.env_name, "flow-logs"),
            retention=retention_days,
            removal_policy=RemovalPolicy.DESTROY,
        )
        for key, value in merge_tags(
            self.vpc_config.base_tags, {"Name": f"{self.description} VPC Flow Logs"}
        ).items():
            Tags.of(log_group).add(key, value)

        iam.Policy(
            self,
            "FlowLogsPolicy",
            policy_name="vpc-flow-logs",
            roles=[role],
            statements=[iam.PolicyStatement(actions=FLOW_LOG_ACTIONS, resources=["*"])],
        )

        self.flow_log = ec2.CfnFlowLog(
            self,
            "FlowLog",
            resource_id=self.vpc.ref,
            resource_type="VPC",
            traffic_type=traffic_type,
            log_destination_type="cloud-watch-logs",
            log_destination=log_group.log_group_arn,
            deliver_logs_permission_arn=role.role_arn,
            tags=self._tags(f"{self.description} VPC Flow Log"),
        )
        logger.info("flow_logging_enabled", stack=self.node.id, traffic_type=traffic_type)
        return self.flow_log

    def _create_outputs(self) -> None:
        environment = self.env_name
        CfnOutput(
            self,
            "VpcId",
            value=self.vpc.ref,
            description="VPC ID",
            export_name=f"{environment}-vpc-id",
        )
        CfnOutput(
            self,
            "VpcCidr",
            value=self.vpc.attr_cidr_block,
            description="VPC IPv4 CIDR block",
            export_name=f"{environment}-vpc-cidr",
        )
        CfnOutput(
            self,
            "VpcArn",
            value=self.vpc_arn,
            description="VPC ARN",
            export_name=f"{environment}-vpc-arn",
        )
        CfnOutput(
            self,
            "PrivateSubnetIds",
            value=",".join([subnet.ref for subnet in self.private_subnets]),
            description="Comma-separated list of private subnet IDs, in zone order",
            export_name=f"{environment}-private-subnet-ids",
        )
        CfnOutput(
            self,
            "PublicSubnetIds",
            value=",".join([subnet.ref for subnet in self.public_subnets]),
            description="Comma-separated list of public subnet IDs, in zone order",
            export_name=f"{environment}-public-subnet-ids",
        )
