"""Command line interface for Voote."""

from __future__ import annotations

import argparse
import functools
import sys
from typing import Callable, Dict, List, Optional, Tuple

from voote import compiler, config, deployer, utils, verify
from voote.errors import VooteError
from voote.evm import DEFAULT_TIMEOUT, EVMClient


class VooteCLI:
    """Dispatches parsed arguments to the toolchain commands."""

    def __init__(self, args: argparse.Namespace) -> None:
        self.args = args
        self.commands: Dict[str, Tuple[str, Callable[[config.ToolchainConfig], int]]] = {
            "deploy": ("Deploy contract", self.deploy),
            "compile": ("Compile contracts", self.compile),
            "verify": ("Verify contract source", self.verify),
            "config": ("Show configuration", self.show_config),
        }

    def run(self) -> int:
        """Load configuration and run the selected command."""
        command = self.args.command or "deploy"
        _, callback = self.commands[command]

        try:
            toolchain = config.load_config()
        except VooteError as e:
            if command == "deploy":
                print(deployer.FAILURE_MESSAGE.format(error=e), file=sys.stderr)
            else:
                utils.error(str(e))
            return 1

        return callback(toolchain)

    def deploy(self, toolchain: config.ToolchainConfig) -> int:
        client_factory = functools.partial(EVMClient, timeout=self.args.timeout)
        return deployer.run_deployment(
            toolchain,
            contract_name=self.args.contract,
            network=self.args.network,
            client_factory=client_factory,
        )

    def compile(self, toolchain: config.ToolchainConfig) -> int:
        try:
            compiled = compiler.compile_project(toolchain)
        except VooteError as e:
            utils.error(str(e))
            return 1
        for name in compiled:
            utils.result(name)
        utils.success(f"Compiled {len(compiled)} contract(s) successfully")
        return 0

    def verify(self, toolchain: config.ToolchainConfig) -> int:
        try:
            outcome = verify.verify_contract(
                toolchain,
                self.args.address,
                contract_name=self.args.contract,
                network=self.args.network,
                constructor_args_hex=self.args.constructor_args,
            )
        except VooteError as e:
            utils.error(str(e))
            return 1
        utils.success(f"{outcome.address} verified: {outcome.message}")
        return 0

    def show_config(self, toolchain: config.ToolchainConfig) -> int:
        rows = utils.flatten("", config.describe_config(toolchain))
        utils.print_table("Voote configuration", rows)
        return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all subcommands."""
    parser = argparse.ArgumentParser(prog="voote", description="Voote contract toolchain")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--network",
        default=None,
        help=f"Network profile to use (default: {config.DEFAULT_NETWORK})",
    )
    common.add_argument(
        "--contract",
        default=config.DEFAULT_CONTRACT,
        help=f"Contract name, bare or fully qualified (default: {config.DEFAULT_CONTRACT})",
    )

    subparsers = parser.add_subparsers(dest="command")

    deploy = subparsers.add_parser("deploy", parents=[common], help="Deploy the contract (default)")
    deploy.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Seconds to wait for confirmation (default: {DEFAULT_TIMEOUT})",
    )

    subparsers.add_parser("compile", help="Compile contracts/ into artifacts/")

    verify_cmd = subparsers.add_parser("verify", parents=[common], help="Verify a deployed contract's source")
    verify_cmd.add_argument("address", help="Deployed contract address")
    verify_cmd.add_argument(
        "--constructor-args",
        default="",
        help="ABI-encoded constructor arguments as hex",
    )

    subparsers.add_parser("config", help="Show the configuration with secrets redacted")

    # Running with no subcommand deploys with the defaults
    parser.set_defaults(
        command=None,
        network=None,
        contract=config.DEFAULT_CONTRACT,
        timeout=DEFAULT_TIMEOUT,
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    return VooteCLI(args).run()


if __name__ == "__main__":
    sys.exit(main())
