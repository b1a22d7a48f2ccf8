"""Tests for the command line interface."""

from unittest.mock import patch

import pytest

from file_semaphore.cli.main import main, resolve_config, run
from file_semaphore.cli.parser import parse_arguments
from file_semaphore.core.constants import ENV_GUARD, ENV_LEASE_SECONDS, ENV_ROOT, EXIT_ERROR, EXIT_NOT_HELD, EXIT_OK
from file_semaphore.core.locks import KeyedFileLock


def _run(*argv):
    return run(parse_arguments(list(argv)))


class TestParseArguments:
    def test_acquire(self):
        args = parse_arguments(["--root", "/tmp/locks", "--lease-seconds", "30", "acquire", "job"])

        assert args.command == "acquire"
        assert args.key == "job"
        assert args.root == "/tmp/locks"
        assert args.lease_seconds == 30
        assert args.guard is None
        assert args.log_format == "text"

    def test_status_key_optional(self):
        assert parse_arguments(["status"]).key is None

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_arguments([])

    def test_unknown_guard_rejected(self):
        with pytest.raises(SystemExit):
            parse_arguments(["--guard", "redis", "status"])


class TestResolveConfig:
    def test_cli_overrides_env(self, clean_env, tmp_path):
        clean_env.setenv(ENV_ROOT, str(tmp_path / "env-root"))
        clean_env.setenv(ENV_LEASE_SECONDS, "10")
        clean_env.setenv(ENV_GUARD, "none")
        args = parse_arguments(["--root", str(tmp_path / "cli-root"), "--lease-seconds", "20", "status"])

        config = resolve_config(args, logger=None)

        assert config.root_path == tmp_path / "cli-root"
        assert config.lease_seconds == 20
        assert config.guard == "none"

    def test_env_used_when_no_flags(self, clean_env, tmp_path):
        clean_env.setenv(ENV_ROOT, str(tmp_path))
        clean_env.setenv(ENV_LEASE_SECONDS, "10")

        config = resolve_config(parse_arguments(["status"]), logger=None)

        assert config.root_path == tmp_path
        assert config.lease_seconds == 10


class TestRun:
    def test_acquire_then_blocked(self, clean_env, lock_root):
        assert _run("--root", str(lock_root), "acquire", "job") == EXIT_OK
        assert _run("--root", str(lock_root), "acquire", "job") == EXIT_NOT_HELD
        assert (lock_root / "job").is_file()

    def test_release(self, clean_env, lock_root):
        _run("--root", str(lock_root), "acquire", "job")

        assert _run("--root", str(lock_root), "release", "job") == EXIT_OK
        assert _run("--root", str(lock_root), "release", "job") == EXIT_NOT_HELD

    def test_logs_go_to_stderr(self, clean_env, lock_root, capsys):
        _run("--root", str(lock_root), "acquire", "job")

        captured = capsys.readouterr()
        assert 'Acquired new key "job"' in captured.err
        assert captured.out == ""

    def test_json_logs(self, clean_env, lock_root, capsys):
        _run("--root", str(lock_root), "--log-format", "json", "acquire", "job")

        err_lines = [line for line in capsys.readouterr().err.splitlines() if line.startswith("{")]
        assert any('"Acquired new key \\"job\\""' in line for line in err_lines)
        assert any(f'"root": "{lock_root}"' in line for line in err_lines)

    def test_status_single_key(self, clean_env, lock_root, capsys):
        assert _run("--root", str(lock_root), "status", "job") == EXIT_NOT_HELD
        assert "job: free" in capsys.readouterr().out

        _run("--root", str(lock_root), "acquire", "job")
        capsys.readouterr()

        assert _run("--root", str(lock_root), "status", "job") == EXIT_OK
        assert "job: held" in capsys.readouterr().out

    def test_status_expired_key(self, clean_env, lock_root, capsys):
        KeyedFileLock(lock_root)
        (lock_root / "old").write_text("1", encoding="ascii")

        assert _run("--root", str(lock_root), "status", "old") == EXIT_NOT_HELD
        assert "old: expired at 1" in capsys.readouterr().out

    def test_status_lists_all(self, clean_env, lock_root, capsys):
        KeyedFileLock(lock_root)
        (lock_root / "old").write_text("1", encoding="ascii")
        _run("--root", str(lock_root), "acquire", "job")
        capsys.readouterr()

        assert _run("--root", str(lock_root), "status") == EXIT_OK

        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("job\theld\t")
        assert lines[1] == "old\texpired\t1"

    def test_status_empty(self, clean_env, lock_root, capsys):
        assert _run("--root", str(lock_root), "status") == EXIT_OK
        assert "No leases under" in capsys.readouterr().out

    def test_root_is_file(self, clean_env, tmp_path, capsys):
        file_path = tmp_path / "file"
        file_path.write_text("x", encoding="utf-8")

        assert _run("--root", str(file_path), "acquire", "job") == EXIT_ERROR
        assert "Error: Expected directory" in capsys.readouterr().err

    def test_missing_root(self, clean_env, capsys):
        assert _run("status") == EXIT_ERROR
        assert ENV_ROOT in capsys.readouterr().err

    def test_invalid_key(self, clean_env, lock_root, capsys):
        assert _run("--root", str(lock_root), "acquire", "../escape") == EXIT_ERROR
        assert "Invalid lock key" in capsys.readouterr().err

    def test_write_failure(self, clean_env, lock_root, capsys):
        with patch.object(KeyedFileLock, "_write_expiry", side_effect=OSError("disk full")):
            assert _run("--root", str(lock_root), "acquire", "job") == EXIT_ERROR
        assert 'Error: Failed to acquire key "job"' in capsys.readouterr().err

    def test_status_root_removed_after_start(self, clean_env, lock_root, capsys):
        with patch.object(KeyedFileLock, "leases", side_effect=FileNotFoundError(2, "No such file or directory")):
            assert _run("--root", str(lock_root), "status") == EXIT_ERROR
        assert "Error: [Errno 2] No such file or directory" in capsys.readouterr().err

    def test_main_exits_with_code(self, clean_env, lock_root):
        with pytest.raises(SystemExit) as exc_info:
            main(["--root", str(lock_root), "acquire", "job"])
        assert exc_info.value.code == EXIT_OK
