"""Tests for env.py — environment filter policies."""

import dataclasses

import pytest

from proc_runner.env import DEFAULT_IGNORED_ENV_VARS, EnvMode, EnvPolicy

ENVIRON = {"PATH": "/usr/bin", "HOME": "/home/me", "SECRET": "s3cr3t", "SSH_AUTH_SOCK": "/tmp/agent"}


def test_pass_through_copies_everything():
    env = EnvPolicy.pass_through().apply(ENVIRON)
    assert env == ENVIRON
    assert env is not ENVIRON


def test_deny_drops_named():
    env = EnvPolicy.deny(["SECRET"]).apply(ENVIRON)
    assert "SECRET" not in env
    assert env["PATH"] == "/usr/bin"
    assert env["SSH_AUTH_SOCK"] == "/tmp/agent"


def test_deny_default_set():
    policy = EnvPolicy.deny()
    assert policy.mode is EnvMode.DENY
    assert policy.names == frozenset(DEFAULT_IGNORED_ENV_VARS)
    assert "SSH_AUTH_SOCK" not in policy.apply(ENVIRON)


def test_allow_keeps_only_named():
    env = EnvPolicy.allow(["PATH", "MISSING"]).apply(ENVIRON)
    assert env == {"PATH": "/usr/bin"}


def test_allow_empty():
    assert EnvPolicy.allow([]).apply(ENVIRON) == {}


def test_defaults_to_os_environ(monkeypatch):
    monkeypatch.setenv("PROC_RUNNER_PROBE", "1")
    assert EnvPolicy.pass_through().apply()["PROC_RUNNER_PROBE"] == "1"
    assert "PROC_RUNNER_PROBE" not in EnvPolicy.deny(["PROC_RUNNER_PROBE"]).apply()


def test_policy_is_immutable():
    policy = EnvPolicy.allow(["PATH"])
    with pytest.raises(dataclasses.FrozenInstanceError):
        policy.mode = EnvMode.PASS_THROUGH


def test_single_string_rejected():
    with pytest.raises(TypeError):
        EnvPolicy.deny("SECRET")
    with pytest.raises(TypeError):
        EnvPolicy.allow("PATH")


def test_single_name_in_a_list():
    env = EnvPolicy.deny(["SECRET"]).apply(ENVIRON)
    assert "SECRET" not in env
    assert EnvPolicy.allow(["PATH"]).apply(ENVIRON) == {"PATH": "/usr/bin"}
