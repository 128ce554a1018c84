"""
Unit tests for the promotion workflow
Tests CDK command construction, identity checks and promotion order
"""
import subprocess
import unittest
from unittest.mock import Mock, call

from botocore.exceptions import ClientError

from cdk_demo.config.environments import ENVIRONMENTS, load_environment_table
from cdk_demo.errors import ConfigurationError, DeploymentError
from cdk_demo.promotion import (
    PROMOTION_ORDER,
    CdkAction,
    build_cdk_command,
    get_cdk_binary,
    next_environment,
    promote,
    run_action,
    run_cdk,
    verify_caller_account,
)


def _completed(returncode=0):
    return subprocess.CompletedProcess(args=[], returncode=returncode)


def _sts_for(account):
    sts = Mock()
    sts.get_caller_identity.return_value = {"Account": account, "Arn": "arn:aws:sts::x:assumed-role/deploy/ci"}
    return sts


class TestPromotionOrder(unittest.TestCase):
    """Test the dev -> uat -> stage -> prod chain"""

    def test_order_covers_every_environment(self):
        self.assertEqual(set(PROMOTION_ORDER), set(ENVIRONMENTS))

    def test_next_environment(self):
        self.assertEqual(next_environment("dev"), "uat")
        self.assertEqual(next_environment("uat"), "stage")
        self.assertEqual(next_environment("stage"), "prod")
        self.assertIsNone(next_environment("prod"))

    def test_unknown_environment(self):
        with self.assertRaises(ConfigurationError):
            next_environment("qa")


class TestBuildCdkCommand(unittest.TestCase):
    """Test argv construction for the CDK CLI"""

    def test_synth(self):
        self.assertEqual(
            build_cdk_command(CdkAction.SYNTH, ENVIRONMENTS["dev"], cdk_binary=["cdk"]),
            ["cdk", "synth", "dev/*", "--context", "env=dev"]
        )

    def test_deploy_non_production(self):
        self.assertEqual(
            build_cdk_command("deploy", ENVIRONMENTS["uat"], cdk_binary=["cdk"]),
            ["cdk", "deploy", "uat/*", "--context", "env=uat", "--require-approval", "never"]
        )

    def test_deploy_production_keeps_approval(self):
        command = build_cdk_command(CdkAction.DEPLOY, ENVIRONMENTS["prod"], cdk_binary=["cdk"])
        self.assertEqual(command[-2:], ["--require-approval", "broadening"])

    def test_destroy_forced(self):
        command = build_cdk_command(CdkAction.DESTROY, ENVIRONMENTS["dev"], cdk_binary=["cdk"])
        self.assertEqual(command[-1], "--force")

    def test_diff_fail_flag(self):
        command = build_cdk_command(CdkAction.DIFF, ENVIRONMENTS["dev"], cdk_binary=["cdk"], fail_on_diff=True)
        self.assertIn("--fail", command)
        command = build_cdk_command(CdkAction.DIFF, ENVIRONMENTS["dev"], cdk_binary=["cdk"])
        self.assertNotIn("--fail", command)

    def test_unknown_action(self):
        with self.assertRaises(ValueError):
            build_cdk_command("bootstrap", ENVIRONMENTS["dev"], cdk_binary=["cdk"])

    def test_cdk_binary_from_environment(self):
        self.assertEqual(get_cdk_binary({"CDK_BINARY": "npx cdk"}), ["npx", "cdk"])
        self.assertEqual(get_cdk_binary({}), ["cdk"])

    def test_blank_cdk_binary_falls_back_to_default(self):
        self.assertEqual(get_cdk_binary({"CDK_BINARY": ""}), ["cdk"])
        self.assertEqual(get_cdk_binary({"CDK_BINARY": "   "}), ["cdk"])


class TestVerifyCallerAccount(unittest.TestCase):
    """Test the federated identity check"""

    def test_matching_account(self):
        sts = _sts_for("222222222222")
        self.assertEqual(verify_caller_account(ENVIRONMENTS["uat"], sts_client=sts), "222222222222")

    def test_mismatched_account(self):
        with self.assertRaises(DeploymentError) as ctx:
            verify_caller_account(ENVIRONMENTS["prod"], sts_client=_sts_for("111111111111"))
        self.assertIn("444444444444", str(ctx.exception))

    def test_identity_unavailable(self):
        sts = Mock()
        sts.get_caller_identity.side_effect = ClientError(
            {"Error": {"Code": "ExpiredToken", "Message": "token expired"}},
            "GetCallerIdentity"
        )
        with self.assertRaises(DeploymentError) as ctx:
            verify_caller_account(ENVIRONMENTS["dev"], sts_client=sts)
        self.assertIn("ExpiredToken", str(ctx.exception))


class TestRunCdk(unittest.TestCase):
    """Test external command execution"""

    def test_success(self):
        runner = Mock(return_value=_completed(0))
        run_cdk(["cdk", "synth"], cwd="/work", runner=runner)
        runner.assert_called_once_with(["cdk", "synth"], cwd="/work", check=False)

    def test_non_zero_exit(self):
        runner = Mock(return_value=_completed(3))
        with self.assertRaises(DeploymentError) as ctx:
            run_cdk(["cdk", "deploy"], runner=runner)
        self.assertEqual(ctx.exception.returncode, 3)
        self.assertEqual(ctx.exception.command, ["cdk", "deploy"])

    def test_missing_binary(self):
        runner = Mock(side_effect=FileNotFoundError("cdk"))
        with self.assertRaises(DeploymentError):
            run_cdk(["cdk", "synth"], runner=runner)

    def test_deploy_checks_account_first(self):
        runner = Mock(return_value=_completed(0))
        with self.assertRaises(DeploymentError):
            run_action(CdkAction.DEPLOY, ENVIRONMENTS["dev"], sts_client=_sts_for("999999999999"),
                       runner=runner, cdk_binary=["cdk"])
        runner.assert_not_called()

    def test_diff_skips_account_check(self):
        runner = Mock(return_value=_completed(0))
        sts = Mock()
        run_action(CdkAction.DIFF, ENVIRONMENTS["dev"], sts_client=sts, runner=runner, cdk_binary=["cdk"])
        sts.get_caller_identity.assert_not_called()
        runner.assert_called_once()


class TestPromote(unittest.TestCase):
    """Test promotion to the next environment"""

    def test_promote_dev_to_uat(self):
        runner = Mock(return_value=_completed(0))

        target = promote("dev", sts_client=_sts_for("222222222222"), runner=runner, cdk_binary=["cdk"])

        self.assertEqual(target.name, "uat")
        self.assertEqual(runner.call_args_list, [
            call(["cdk", "diff", "uat/*", "--context", "env=uat"], cwd=None, check=False),
            call(["cdk", "deploy", "uat/*", "--context", "env=uat", "--require-approval", "never"],
                 cwd=None, check=False),
        ])

    def test_promote_uses_given_table(self):
        table = load_environment_table({"stage": {"account": "555555555555"}})
        runner = Mock(return_value=_completed(0))

        target = promote("uat", table=table, sts_client=_sts_for("555555555555"),
                         runner=runner, cdk_binary=["cdk"])

        self.assertEqual(target.account, "555555555555")

    def test_promote_stops_when_diff_fails(self):
        runner = Mock(return_value=_completed(1))
        with self.assertRaises(DeploymentError):
            promote("stage", verify_account=False, runner=runner, cdk_binary=["cdk"])
        self.assertEqual(runner.call_count, 1)

    def test_wrong_credentials_do_not_deploy(self):
        runner = Mock(return_value=_completed(0))
        with self.assertRaises(DeploymentError):
            promote("dev", sts_client=_sts_for("111111111111"), runner=runner, cdk_binary=["cdk"])
        runner.assert_not_called()

    def test_cannot_promote_past_prod(self):
        with self.assertRaises(ConfigurationError):
            promote("prod", verify_account=False, runner=Mock(), cdk_binary=["cdk"])


if __name__ == "__main__":
    unittest.main()
