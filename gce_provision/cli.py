"""
GCE Provision - Command Line Interface

Follows gcloud flag conventions.

Usage:
    gce-provision create --config=.gce-provision.yml
    gce-provision create --project=my-project --image=debian-12 \\
        --client-email=ci@my-project.iam.gserviceaccount.com
    gce-provision status --format=json
    gce-provision destroy
"""

import argparse
import json
import subprocess
import sys
from dataclasses import replace
from typing import Any, Dict, Optional

import yaml

from gce_provision.core.config import VERSION, create_provisioning_config, load_config_file
from gce_provision.core.exceptions import ConfigError
from gce_provision.main import create_instance, default_state_path, destroy_instance
from gce_provision.orchestration import StateFile


class OutputFormatter:
    """
    Handle output formatting similar to gcloud.

    Supports: json, yaml, table
    """

    @staticmethod
    def format_output(data: Dict[str, Any], format_type: str = 'table'):
        """Format output based on format type."""
        if format_type == 'json':
            return json.dumps(data, indent=2, sort_keys=True)
        elif format_type == 'yaml':
            return yaml.safe_dump(data, default_flow_style=False)
        elif format_type == 'table':
            return OutputFormatter._format_table(data)
        else:
            return str(data)

    @staticmethod
    def _format_table(data: Dict[str, Any]) -> str:
        """Format as table."""
        lines = []
        lines.append("+-" + "-" * 50 + "-+")
        for key, value in data.items():
            lines.append(f"| {key:20} | {str(value):27} |")
        lines.append("+-" + "-" * 50 + "-+")
        return "\n".join(lines)


def get_gcloud_config(key: str) -> Optional[str]:
    """
    Read configuration from gcloud config.

    Args:
        key: Config key (e.g., 'core/project', 'compute/region')

    Returns:
        Config value or None
    """
    try:
        result = subprocess.run(
            ['gcloud', 'config', 'get-value', key],
            capture_output=True,
            text=True,
            timeout=5
        )
    except (subprocess.SubprocessError, FileNotFoundError):
        # gcloud not available or error
        return None

    value = result.stdout.strip()
    return value if value and value != '(unset)' else None


def create_parser() -> argparse.ArgumentParser:
    """
    Create argument parser with gcloud-style structure.

    Returns:
        Configured ArgumentParser
    """

    parser = argparse.ArgumentParser(
        prog='gce-provision',
        description='Create and destroy a Compute Engine test instance',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
EXAMPLES
    To create an instance from a config file:
        $ gce-provision create --config=.gce-provision.yml

    To create a preemptible instance in any zone:
        $ gce-provision create --config=.gce-provision.yml \\
            --region=any --preemptible

    To destroy it again:
        $ gce-provision destroy --config=.gce-provision.yml
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'gce-provision v{VERSION}'
    )

    subparsers = parser.add_subparsers(
        dest='command',
        required=True,
        help='Available commands'
    )

    create_parser_ = subparsers.add_parser(
        'create',
        help='Create an instance and wait for SSH',
        description='Create a boot disk and instance, then wait until SSH answers.'
    )
    _add_common_args(create_parser_)
    _add_create_args(create_parser_)

    destroy_parser = subparsers.add_parser(
        'destroy',
        help='Destroy the recorded instance',
        description='Delete the instance recorded in the state file and clear the state.'
    )
    _add_common_args(destroy_parser)

    status_parser = subparsers.add_parser(
        'status',
        help='Show the recorded instance',
        description='Print the state file without calling the API.'
    )
    _add_common_args(status_parser)

    return parser


def _add_common_args(parser: argparse.ArgumentParser):
    """Add arguments common to all commands."""

    config_group = parser.add_argument_group('CONFIGURATION FLAGS')
    config_group.add_argument(
        '--config',
        metavar='FILE',
        help='YAML file with provisioning options.'
    )
    config_group.add_argument(
        '--state',
        metavar='FILE',
        help='State file. Default: .gce-provision/<base-name>.json'
    )
    config_group.add_argument(
        '--project',
        metavar='PROJECT',
        help='GCP project ID. Defaults to gcloud config project.'
    )
    config_group.add_argument(
        '--base-name',
        metavar='NAME',
        help='Human-readable name the instance name is derived from. Default: default'
    )
    config_group.add_argument(
        '--json-key',
        metavar='FILE',
        help='Service account JSON key. Default: application default credentials.'
    )

    output = parser.add_argument_group('OUTPUT FLAGS')
    output.add_argument(
        '--format',
        metavar='FORMAT',
        choices=['json', 'yaml', 'table', 'disable'],
        default='table',
        help='Output format. One of: json, yaml, table, disable. Default: table'
    )
    output.add_argument(
        '--verbosity',
        metavar='VERBOSITY',
        choices=['debug', 'info', 'warning', 'error', 'critical'],
        default='info',
        help='Logging verbosity. One of: debug, info, warning, error, critical. Default: info'
    )
    output.add_argument(
        '--log-file',
        metavar='LOG_FILE',
        help='Write logs to this file.'
    )


def _add_create_args(parser: argparse.ArgumentParser):
    """Add create-specific arguments."""

    required = parser.add_argument_group('REQUIRED FLAGS (unless set in --config)')
    required.add_argument('--image', metavar='IMAGE', help='Boot image name or URL.')
    required.add_argument('--client-email', metavar='EMAIL', help='Client service account email.')

    placement = parser.add_argument_group('PLACEMENT FLAGS')
    placement.add_argument('--region', metavar='REGION',
                           help="Region to pick a zone from, or 'any'. Default: us-central1")
    placement.add_argument('--zone', metavar='ZONE', help='Zone. Default: picked at random in region.')

    instance = parser.add_argument_group('INSTANCE FLAGS')
    instance.add_argument('--name', metavar='NAME', help='Instance name. Default: generated.')
    instance.add_argument('--machine-type', metavar='TYPE', help='Machine type. Default: n1-standard-1')
    instance.add_argument('--network', metavar='NETWORK', help='Network. Default: default')
    instance.add_argument('--tags', metavar='TAG,...', help='Comma-separated network tags.')
    instance.add_argument('--service-accounts', metavar='SCOPE,...',
                          help='Comma-separated scopes for the default service account.')
    instance.add_argument('--preemptible', action='store_true', default=None,
                          help='Create a preemptible instance.')
    instance.add_argument('--auto-restart', action='store_true', default=None,
                          help='Restart the instance automatically after a crash.')

    disk = parser.add_argument_group('DISK FLAGS')
    disk.add_argument('--disk-size', type=int, metavar='GB', help='Boot disk size in GB. Default: 10')
    disk.add_argument('--no-autodelete-disk', dest='autodelete_disk', action='store_false',
                      default=None, help='Keep the boot disk when the instance is deleted.')

    ssh = parser.add_argument_group('SSH FLAGS')
    ssh.add_argument('--username', metavar='USER', help='Login user. Default: current user.')
    ssh.add_argument('--public-key', metavar='FILE', help='SSH public key to install.')
    ssh.add_argument('--ssh-timeout', type=int, metavar='SECONDS',
                     help='Timeout for SSH to answer in seconds. Default: 600')

    parser.add_argument('--no-progress', action='store_true', help='Disable the progress bar.')


def _split(value: Optional[str]):
    if value is None:
        return None
    return [item.strip() for item in value.split(',') if item.strip()]


def args_to_config(args: argparse.Namespace):
    """
    Convert arguments (plus the optional --config file) to a ProvisioningConfig.

    Flags that were not given leave the file's values (or the defaults) alone.
    """
    overrides = {
        'google_project': args.project,
        'base_name': args.base_name,
        'google_json_key_location': args.json_key,
        'log_file': args.log_file,
        'log_level': args.verbosity.upper(),
    }

    if args.command == 'create':
        overrides.update({
            'image_name': args.image,
            'google_client_email': args.client_email,
            'region': args.region,
            'zone_name': args.zone,
            'inst_name': args.name,
            'machine_type': args.machine_type,
            'network': args.network,
            'tags': _split(args.tags),
            'service_accounts': _split(args.service_accounts),
            'preemptible': args.preemptible,
            'auto_restart': args.auto_restart,
            'disk_size': args.disk_size,
            'autodelete_disk': args.autodelete_disk,
            'username': args.username,
            'public_key_path': args.public_key,
            'ssh_timeout': args.ssh_timeout,
        })

    if args.config:
        config = load_config_file(args.config, **overrides)
    else:
        config = create_provisioning_config(**overrides)

    if not config.google_project:
        project = get_gcloud_config('core/project')
        if project:
            config = replace(config, google_project=project)

    return config


def handle_create(args: argparse.Namespace) -> int:
    """Handle create command."""
    config = args_to_config(args)
    state = create_instance(
        config,
        state_path=args.state,
        debug=args.verbosity == 'debug',
        show_progress=not args.no_progress
    )
    if state is None:
        return 1

    if args.format != 'disable':
        print(OutputFormatter.format_output(state.to_dict(), args.format))
    return 0


def handle_destroy(args: argparse.Namespace) -> int:
    """Handle destroy command."""
    config = args_to_config(args)
    success = destroy_instance(
        config,
        state_path=args.state,
        debug=args.verbosity == 'debug'
    )
    return 0 if success else 1


def handle_status(args: argparse.Namespace) -> int:
    """Handle status command."""
    config = args_to_config(args)
    state_file = StateFile(args.state or default_state_path(config))
    state = state_file.load()

    data = state.to_dict()
    data['status'] = 'CREATED' if state.exists else 'ABSENT'
    if args.format != 'disable':
        print(OutputFormatter.format_output(data, args.format))
    return 0


def main(argv=None):
    """Main CLI entry point."""

    parser = create_parser()
    args = parser.parse_args(argv)

    handlers = {
        'create': handle_create,
        'destroy': handle_destroy,
        'status': handle_status,
    }

    try:
        return handlers[args.command](args)
    except ConfigError as e:
        print(f"ERROR: (gce-provision) {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == '__main__':
    sys.exit(main())
