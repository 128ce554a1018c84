"""
Monitoring Construct for cdk-demo
CloudWatch alarms for the hello function and the REST API, routed to SNS
"""
from typing import Dict
from aws_cdk import (
    Duration,
    aws_apigateway as apigw,
    aws_cloudwatch as cloudwatch,
    aws_cloudwatch_actions as cloudwatch_actions,
    aws_lambda as lambda_,
    aws_sns as sns,
    aws_sns_subscriptions as sns_subs,
)
from constructs import Construct

from ..config.environments import EnvironmentConfig


class MonitoringConstruct(Construct):
    """Construct for CloudWatch alarms and the alarm topic"""

    def __init__(self, scope: Construct, construct_id: str,
                 config: EnvironmentConfig, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.config = config
        self.alarms: Dict[str, cloudwatch.Alarm] = {}
        self.alarm_thresholds = self._get_alarm_thresholds()

        self.alarm_topic = sns.Topic(
            self, "AlarmTopic",
            topic_name=f"{config.resource_prefix}-alarms",
            display_name=f"cdk-demo {config.name} alarms"
        )

    def _get_alarm_thresholds(self) -> Dict[str, float]:
        """Production alarms on the first error, other environments tolerate a few"""
        if self.config.is_production:
            return {"lambda_errors": 1.0, "api_5xx": 1.0}
        return {"lambda_errors": 5.0, "api_5xx": 5.0}

    def _add_alarm(self, key: str, alarm: cloudwatch.Alarm) -> None:
        alarm.add_alarm_action(cloudwatch_actions.SnsAction(self.alarm_topic))
        self.alarms[key] = alarm

    def add_lambda_monitoring(self, function_key: str, function: lambda_.IFunction) -> None:
        """Add error and duration alarms for a Lambda function"""
        self._add_alarm(f"{function_key}_errors", cloudwatch.Alarm(
            self, f"{function_key.title()}ErrorAlarm",
            alarm_name=f"{self.config.resource_prefix}-{function_key}-errors",
            alarm_description=f"Errors reported by the {function_key} function",
            metric=function.metric_errors(
                period=Duration.minutes(5),
                statistic="Sum"
            ),
            threshold=self.alarm_thresholds["lambda_errors"],
            evaluation_periods=1,
            comparison_operator=cloudwatch.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
            treat_missing_data=cloudwatch.TreatMissingData.NOT_BREACHING
        ))

        # p99 above 80% of the configured timeout means invocations are about to time out
        duration_threshold_ms = self.config.lambda_timeout_seconds * 1000 * 0.8
        self._add_alarm(f"{function_key}_duration", cloudwatch.Alarm(
            self, f"{function_key.title()}DurationAlarm",
            alarm_name=f"{self.config.resource_prefix}-{function_key}-duration",
            alarm_description=f"p99 duration of the {function_key} function near its timeout",
            metric=function.metric_duration(
                period=Duration.minutes(5),
                statistic="p99"
            ),
            threshold=duration_threshold_ms,
            evaluation_periods=2,
            treat_missing_data=cloudwatch.TreatMissingData.NOT_BREACHING
        ))

    def add_api_monitoring(self, api: apigw.RestApi) -> None:
        """Add a server-error alarm for the REST API"""
        self._add_alarm("api_5xx", cloudwatch.Alarm(
            self, "Api5xxAlarm",
            alarm_name=f"{self.config.resource_prefix}-api-5xx",
            alarm_description="Server errors returned by the REST API",
            metric=api.metric_server_error(
                period=Duration.minutes(5),
                statistic="Sum"
            ),
            threshold=self.alarm_thresholds["api_5xx"],
            evaluation_periods=1,
            comparison_operator=cloudwatch.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
            treat_missing_data=cloudwatch.TreatMissingData.NOT_BREACHING
        ))

    def add_email_subscription(self, email: str) -> None:
        self.alarm_topic.add_subscription(sns_subs.EmailSubscription(email))
