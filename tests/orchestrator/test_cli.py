"""
Tests for the Command tree.
"""

import pytest

from core.exceptions import CommandLineError, ServiceError
from orchestrator.cli import Command, new_command
from orchestrator.component import CommandInitializerFn


# ============================================================
# FIXTURES
# ============================================================

@pytest.fixture
def calls():
    return []


@pytest.fixture
def tree(calls):
    """root -> serve, with every hook recording its name."""
    root = Command("svc", "Test service")
    serve = Command("serve", "Serve requests")
    root.add_command(serve)

    def hook(name, code=None):
        def fn(cmd, args):
            calls.append((name, cmd.name))
            return code
        return fn

    root.persistent_pre_run = hook("persistent_pre_run")
    root.persistent_post_run = hook("persistent_post_run")
    serve.pre_run = hook("pre_run")
    serve.run = hook("run", code=7)
    serve.post_run = hook("post_run")
    return root


# ============================================================
# EXECUTION TESTS
# ============================================================

class TestExecute:
    """Tests for hook ordering and exit codes."""

    def test_hook_order(self, tree, calls):
        code = tree.execute(["serve"])

        assert code == 7
        assert calls == [
            ("persistent_pre_run", "serve"),
            ("pre_run", "serve"),
            ("run", "serve"),
            ("post_run", "serve"),
            ("persistent_post_run", "serve"),
        ]

    def test_nearest_persistent_hook_wins(self, tree, calls):
        serve = tree.find_command("serve")
        serve.persistent_pre_run = lambda cmd, args: calls.append(("own_pre", cmd.name))

        tree.execute(["serve"])

        assert calls[0] == ("own_pre", "serve")
        assert ("persistent_pre_run", "serve") not in calls

    def test_exception_aborts_remaining_hooks(self, tree, calls):
        serve = tree.find_command("serve")

        def failing(cmd, args):
            raise RuntimeError("boom")

        serve.run = failing

        with pytest.raises(RuntimeError):
            tree.execute(["serve"])

        assert [name for name, _ in calls] == ["persistent_pre_run", "pre_run"]

    def test_command_without_run_prints_help(self, tree, calls, capsys):
        code = tree.execute([])

        assert code == 0
        assert calls == []
        assert "serve" in capsys.readouterr().out

    def test_run_returning_none_is_zero(self):
        cmd = Command("once")
        cmd.run = lambda c, a: None

        assert cmd.execute([]) == 0

    def test_unknown_command_raises(self, tree, calls, capsys):
        with pytest.raises(CommandLineError) as exc_info:
            tree.execute(["nope"])

        assert isinstance(exc_info.value, ServiceError)
        assert "nope" in exc_info.value.message
        assert calls == []
        assert "usage:" in capsys.readouterr().err

    def test_invalid_value_raises(self):
        cmd = Command("svc")
        cmd.add_argument("--workers", type=int, default=1)
        cmd.run = lambda c, a: 0

        with pytest.raises(CommandLineError):
            cmd.execute(["--workers", "many"])

    def test_help_returns_zero(self, tree, calls, capsys):
        assert tree.execute(["--help"]) == 0
        assert tree.execute(["serve", "-h"]) == 0

        assert calls == []
        assert "usage:" in capsys.readouterr().out


# ============================================================
# ARGUMENT TESTS
# ============================================================

class TestArguments:
    """Tests for argument binding and inheritance."""

    def test_bind_runs_before_hooks(self):
        bound = {}
        seen = []
        cmd = Command("svc")
        cmd.add_argument("--workers", type=int, default=1, bind=lambda v: bound.update(workers=v))
        cmd.run = lambda c, a: seen.append(dict(bound))

        cmd.execute(["--workers", "4"])

        assert seen == [{"workers": 4}]

    def test_defaults_are_bound(self):
        bound = {}
        cmd = Command("svc")
        cmd.add_argument("--addr", default=":8080", bind=lambda v: bound.update(addr=v))
        cmd.run = lambda c, a: None

        cmd.execute([])

        assert bound == {"addr": ":8080"}

    def test_persistent_argument_inherited(self, tree):
        bound = []
        tree.add_argument("--region", default="us", persistent=True, bind=bound.append)

        tree.execute(["serve", "--region", "eu"])

        assert bound == ["eu"]

    def test_persistent_argument_before_subcommand(self, tree):
        bound = []
        tree.add_argument("--region", default="us", persistent=True, bind=bound.append)

        tree.execute(["--region", "eu", "serve"])

        assert bound == ["eu"]

    def test_persistent_default_not_clobbered(self, tree):
        bound = []
        tree.add_argument("--region", default="us", persistent=True, bind=bound.append)

        tree.execute(["serve"])

        assert bound == ["us"]

    def test_non_persistent_argument_not_inherited(self, tree):
        tree.add_argument("--root-only", action="store_true")

        with pytest.raises(CommandLineError):
            tree.execute(["serve", "--root-only"])

    def test_store_true_persistent_flag(self, tree):
        bound = []
        tree.add_argument("-v", "--verbose", action="store_true", default=False, persistent=True, bind=bound.append)

        tree.execute(["serve", "-v"])

        assert bound == [True]


# ============================================================
# CONSTRUCTION TESTS
# ============================================================

class TestConstruction:
    """Tests for command composition."""

    def test_initializers_applied(self):
        init = CommandInitializerFn(lambda cmd: cmd.add_argument("--flag", default="x"))
        cmd = new_command("serve", "Serve", init, object())

        cmd.run = lambda c, args: 0 if args.flag == "y" else 1

        assert cmd.execute(["--flag", "y"]) == 0

    def test_lineage_and_find(self, tree):
        serve = tree.find_command("serve")

        assert serve.parent is tree
        assert [c.name for c in serve.lineage()] == ["svc", "serve"]
        assert tree.find_command("missing") is None
