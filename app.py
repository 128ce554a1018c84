#!/usr/bin/env python3
"""
cdk-demo CDK Application Entry Point
"""
import logging
import sys
import aws_cdk as cdk

from cdk_demo.entrypoint import create_stage
from cdk_demo.errors import ConfigurationError

logger = logging.getLogger("cdk_demo")


def main():
    """Main application entry point"""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    app = cdk.App()

    # Environment comes from --context env=<name>, then DEPLOY_ENV
    try:
        create_stage(app)
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    app.synth()


if __name__ == "__main__":
    main()
