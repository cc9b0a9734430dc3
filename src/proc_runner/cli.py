"""Click entry point — all commands."""

import os
import sys

import click

from proc_runner import __version__, log
from proc_runner import config as config_mod
from proc_runner.command_line import CommandLine
from proc_runner.env import EnvPolicy
from proc_runner.runner import CommandFailedError, MissingHomeError

SPAWN_FAILED_EXIT = 127


def _exit_code(returncode: int) -> int:
    # Killed by signal N -> 128 + N, as a shell would report it
    return 128 - returncode if returncode < 0 else returncode


@click.group()
@click.version_option(version=__version__, prog_name="proc-runner")
@click.option("--config", "config_path", default=None, help="Path to a .proc-runner.yaml file")
@click.option("--verbose", "-v", is_flag=True, help="Print debug lines")
@click.pass_context
def main(ctx, config_path, verbose):
    """Run commands with a filtered environment and teed stderr."""
    try:
        cfg = config_mod.load_config(config_path)
    except config_mod.ConfigError as e:
        log.error(str(e))
        sys.exit(1)
    if verbose or cfg.verbose:
        log.set_verbose(True)
    ctx.obj = cfg


@main.command(context_settings={"ignore_unknown_options": True})
@click.option("--cwd", default=None, type=click.Path(exists=True, file_okay=False), help="Working directory")
@click.option("--check", is_flag=True, help="Fail with a report if the command exits non-zero")
@click.option("--no-capture-stderr", is_flag=True, help="Inherit stderr instead of teeing it")
@click.option("--stdin-file", default=None, type=click.File("rb"), help="Pipe this file to the command")
@click.option("--allow-env", multiple=True, help="Only pass these variables")
@click.option("--deny-env", multiple=True, help="Drop these variables")
@click.option("--pass-env", is_flag=True, help="Pass the whole environment")
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_obj
def run(cfg, cwd, check, no_capture_stderr, stdin_file, allow_env, deny_env, pass_env, command):
    """Run COMMAND and print its stdout."""
    chosen = [bool(allow_env), bool(deny_env), pass_env]
    if sum(chosen) > 1:
        raise click.UsageError("--allow-env, --deny-env and --pass-env are mutually exclusive")

    if allow_env:
        policy = EnvPolicy.allow(allow_env)
    elif deny_env:
        policy = EnvPolicy.deny(deny_env)
    elif pass_env:
        policy = EnvPolicy.pass_through()
    else:
        policy = cfg.env_policy()

    runner = config_mod.build_runner(cfg, env_policy=policy)
    opts = cfg.command_opts(stdin=stdin_file.read() if stdin_file else None)
    if no_capture_stderr:
        opts.capture_stderr = False
    workdir = os.path.abspath(cwd or os.getcwd())
    cmdline = CommandLine(command)

    try:
        if check:
            result = runner.run_checked_with_opts(cmdline, workdir, opts)
        else:
            result = runner.run_with_opts(cmdline, workdir, opts)
    except CommandFailedError as e:
        log.error(str(e))
        sys.exit(1)
    except OSError as e:
        log.error(f"Could not start `{cmdline.program()}`: {e}")
        sys.exit(SPAWN_FAILED_EXIT)

    click.echo(result.stdout, nl=False)
    sys.exit(_exit_code(result.returncode))


@main.command(name="exec", context_settings={"ignore_unknown_options": True})
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_obj
def exec_cmd(cfg, command):
    """Replace this process with COMMAND."""
    cmdline = CommandLine(command)
    runner = config_mod.build_runner(cfg)
    try:
        runner.exec(cmdline)
    except OSError as e:
        log.error(f"Could not exec `{cmdline.program()}`: {e}")
        sys.exit(SPAWN_FAILED_EXIT)


@main.command()
@click.pass_obj
def info(cfg):
    """Show hostname and systemd unit paths."""
    runner = config_mod.build_runner(cfg)
    click.echo(f"hostname: {runner.hostname()}")
    click.echo(f"root systemd path: {runner.root_systemd_path()}")
    try:
        click.echo(f"user systemd path: {runner.user_systemd_path()}")
    except MissingHomeError as e:
        click.echo(f"user systemd path: ({e})")


if __name__ == "__main__":
    main()
