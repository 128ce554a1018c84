"""
cdk-demo
Multi-environment REST API backed by AWS Lambda, declared with the AWS CDK
"""

__version__ = "0.1.0"
