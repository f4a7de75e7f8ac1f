#!/usr/bin/env python3
"""
AWS VPC CDK Application

Provisions a VPC with one private and one public subnet per availability
zone, per-zone NAT gateways, and the optional private DNS zone, gateway
endpoints and flow logging configured in config.yaml.

The environment block to deploy comes from DEPLOY_ENVIRONMENT (default DEV):
    DEPLOY_ENVIRONMENT=PROD cdk synth

The aws_vpc_cdk package lives under src/ and must be installed into the
interpreter cdk.json runs before synthesizing:
    pip install -e .
"""
import sys

from aws_vpc_cdk import logging_config  # noqa: F401  configures structlog
from aws_vpc_cdk.cdk_app import build_app, load_config
from aws_vpc_cdk.exceptions import AwsVpcCdkError
from aws_vpc_cdk.settings import get_settings
from aws_vpc_cdk.tracing import setup_tracing

settings = get_settings()

if settings.tracing.enabled:
    setup_tracing(
        service_name=settings.tracing.service_name,
        otlp_endpoint=settings.tracing.otlp_endpoint,
    )

try:
    config = load_config(settings.config_path)
    app = build_app(config, settings.deploy_environment)
except AwsVpcCdkError as e:
    print(f"\n❌ {type(e).__name__}: {e}\n", file=sys.stderr)
    sys.exit(1)

app.synth()
