"""
Error types for cdk-demo
Raised by configuration resolution and the promotion workflow
"""
from typing import List, Optional


class CdkDemoError(Exception):
    """Base class for all cdk-demo errors"""
    pass


class ConfigurationError(CdkDemoError):
    """Raised when an environment cannot be resolved or a record is malformed"""

    def __init__(self, message: str, environment_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.environment_name = environment_name


class DeploymentError(CdkDemoError):
    """Raised when the CDK CLI or the caller identity check fails"""

    def __init__(self, message: str, command: Optional[List[str]] = None,
                 returncode: Optional[int] = None) -> None:
        super().__init__(message)
        self.command = command
        self.returncode = returncode
