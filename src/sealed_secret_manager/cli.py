#!/usr/bin/env python
"""Command-line interface for sealed-secret-manager.

This module provides the main CLI entry point, turning command-line flags
into a SecretDescriptor and handing it to the LifecycleManager.
"""

import sys
from pathlib import Path

import click
from icecream import ic

from sealed_secret_manager import __version__, console
from sealed_secret_manager.config import (
    DEFAULT_CONTROLLER_NAME,
    DEFAULT_CONTROLLER_NAMESPACE,
    DEFAULT_KUBECTL_BINARY,
    DEFAULT_KUBESEAL_BINARY,
    Settings,
    find_repository_root,
)
from sealed_secret_manager.core.manager import LifecycleManager
from sealed_secret_manager.descriptor import build_descriptor, parse_file_source, parse_literal, validate_field_key
from sealed_secret_manager.exceptions import SecretManagerError, ValidationError
from sealed_secret_manager.models import Environment, Operation, SecretDescriptor, SecretType
from sealed_secret_manager.secrets.creation import KubectlSecretBuilder
from sealed_secret_manager.secrets.prompts import auto_approve, confirm
from sealed_secret_manager.secrets.sealing import KubesealGateway
from sealed_secret_manager.store import ManifestStore

_EPILOG = """\b
Examples:
  secret-manager -e dev -o fetch-seal-key
  secret-manager -e dev -n my-ns -s my-secret -o create --from-literal user=admin --from-file ~/keys/app.pem
  secret-manager -e dev -n my-ns -s my-secret -o update --from-literal user=root -d app.pem
  secret-manager -e dev -n my-ns -s my-tls --secret-type tls --cert-path tls.crt --key-path tls.key -o create
  secret-manager -e dev -n my-ns -s my-secret -o delete
"""


class _Command(click.Command):
    """click.Command reporting usage errors with exit status 1."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as err:
            err.exit_code = 1
            raise


def build_manager(settings: Settings, *, assume_yes: bool = False) -> LifecycleManager:
    """Wire the lifecycle manager with the kubectl and kubeseal backed collaborators.

    Args:
        settings: Resolved runtime settings.
        assume_yes: Approve every confirmation without prompting.

    Returns:
        A ready to use LifecycleManager.

    """
    store = ManifestStore(settings.root)
    return LifecycleManager(
        store=store,
        builder=KubectlSecretBuilder(binary=settings.kubectl_binary),
        gateway=KubesealGateway(settings, cert_path_for=store.key_path),
        confirm=auto_approve if assume_yes else confirm,
    )


def descriptor_from_options(
    operation: Operation,
    environment: Environment,
    namespace: str | None,
    secret_name: str | None,
    secret_type: SecretType,
    *,
    from_literal: tuple[str, ...] = (),
    from_file: tuple[str, ...] = (),
    cert_path: Path | None = None,
    key_path: Path | None = None,
    docker_server: str = "",
    docker_username: str = "",
    docker_password: str = "",
    docker_email: str = "",
) -> SecretDescriptor | None:
    """Validate the secret related flags and build a descriptor.

    Returns:
        The descriptor, or None for fetch-seal-key which needs none.

    Raises:
        ValidationError: If the namespace or secret name is missing or invalid,
            or a literal/file entry is malformed.
        MissingInputError: If a create lacks the inputs of its secret type.

    """
    if operation is Operation.FETCH_SEAL_KEY:
        return None
    if not secret_name:
        raise ValidationError("-s/--secret-name parameter is required")
    if not namespace:
        raise ValidationError("-n/--namespace parameter is required")

    sources = [parse_literal(entry) for entry in from_literal]
    sources.extend(parse_file_source(entry) for entry in from_file)

    return build_descriptor(
        secret_type,
        environment,
        namespace,
        secret_name,
        sources=sources,
        cert_path=cert_path,
        key_path=key_path,
        docker_server=docker_server,
        docker_username=docker_username,
        docker_password=docker_password,
        docker_email=docker_email,
        require_payload=operation is Operation.CREATE,
    )


@click.command(
    cls=_Command,
    help="Create, update and delete sealed secret manifests in a GitOps repository",
    epilog=_EPILOG,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(__version__, "--version", message="%(version)s")
@click.option(
    "--env", "-e", "env", required=True, type=click.Choice([e.value for e in Environment]), help="target environment"
)
@click.option("--namespace", "-n", required=False, help="namespace of the secret")
@click.option("--secret-name", "-s", required=False, help="name of the secret")
@click.option(
    "--operation", "-o", required=True, type=click.Choice([o.value for o in Operation]), help="operation to perform"
)
@click.option("--from-literal", multiple=True, metavar="KEY=VALUE", help="literal entry, repeatable")
@click.option("--from-file", multiple=True, metavar="[KEY=]PATH", help="file entry, repeatable")
@click.option(
    "--secret-type",
    type=click.Choice([t.value for t in SecretType]),
    default=SecretType.GENERIC.value,
    show_default=True,
    help="type of secret to create",
)
@click.option("--cert-path", type=click.Path(dir_okay=False, path_type=Path), help="certificate for a tls secret")
@click.option("--key-path", type=click.Path(dir_okay=False, path_type=Path), help="private key for a tls secret")
@click.option("--docker-server", default="", help="registry server for a docker secret")
@click.option("--docker-username", default="", help="registry username for a docker secret")
@click.option("--docker-password", default="", help="registry password for a docker secret")
@click.option("--docker-email", default="", help="registry email for a docker secret")
@click.option("--fields-to-delete", "-d", multiple=True, metavar="KEY", help="field to remove on update, repeatable")
@click.option("--yes", "-y", is_flag=True, help="do not ask for confirmation")
@click.option("--debug", is_flag=True, help="print debug information")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="SECRET_MANAGER_ROOT",
    help="repository root [default: git top level]",
)
@click.option(
    "--controller-name",
    default=DEFAULT_CONTROLLER_NAME,
    show_default=True,
    envvar="SECRET_MANAGER_CONTROLLER_NAME",
    help="SealedSecrets controller name",
)
@click.option(
    "--controller-namespace",
    default=DEFAULT_CONTROLLER_NAMESPACE,
    show_default=True,
    envvar="SECRET_MANAGER_CONTROLLER_NAMESPACE",
    help="SealedSecrets controller namespace",
)
@click.option("--context", envvar="SECRET_MANAGER_KUBE_CONTEXT", help="kube context used to fetch the sealing key")
@click.option(
    "--kubeseal-binary",
    default=DEFAULT_KUBESEAL_BINARY,
    show_default=True,
    envvar="SECRET_MANAGER_KUBESEAL",
    help="kubeseal executable",
)
@click.option(
    "--kubectl-binary",
    default=DEFAULT_KUBECTL_BINARY,
    show_default=True,
    envvar="SECRET_MANAGER_KUBECTL",
    help="kubectl executable",
)
def cli(
    env: str,
    namespace: str | None,
    secret_name: str | None,
    operation: str,
    from_literal: tuple[str, ...],
    from_file: tuple[str, ...],
    secret_type: str,
    cert_path: Path | None,
    key_path: Path | None,
    docker_server: str,
    docker_username: str,
    docker_password: str,
    docker_email: str,
    fields_to_delete: tuple[str, ...],
    yes: bool,
    debug: bool,
    root: Path | None,
    controller_name: str,
    controller_namespace: str,
    context: str | None,
    kubeseal_binary: str,
    kubectl_binary: str,
) -> None:
    """Process CLI arguments and execute the selected operation.

    Exits with status 1 on any validation or operational failure.
    """
    if not debug:
        ic.disable()

    environment = Environment(env)
    op = Operation(operation)

    try:
        descriptor = descriptor_from_options(
            op,
            environment,
            namespace,
            secret_name,
            SecretType(secret_type),
            from_literal=from_literal,
            from_file=from_file,
            cert_path=cert_path,
            key_path=key_path,
            docker_server=docker_server,
            docker_username=docker_username,
            docker_password=docker_password,
            docker_email=docker_email,
        )
        deletions = [validate_field_key(field) for field in fields_to_delete]
        if deletions and op is not Operation.UPDATE:
            console.warning(f"-d/--fields-to-delete is only used by update, ignoring it for {op.value}")
        ic(descriptor, deletions)

        settings = Settings(
            root=root.resolve() if root else find_repository_root(),
            controller_name=controller_name,
            controller_namespace=controller_namespace,
            context=context,
            kubeseal_binary=kubeseal_binary,
            kubectl_binary=kubectl_binary,
        )
        ic(settings)

        manager = build_manager(settings, assume_yes=yes)
        manager.run(op, environment, descriptor, deletions)
    except SecretManagerError as e:
        console.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    cli()
