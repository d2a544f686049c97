"""Tests for the bounded walker and its merge step."""

import logging
import os
from unittest.mock import patch

import pytest

from tenant_audit import walker
from tenant_audit.config import AuditConfig
from tenant_audit.flags import HAN_FLAG, NEZHA_FLAG, SHELL_SCRIPT_FLAG
from tenant_audit.models import WalkResult
from tenant_audit.walker import walk

TEN_MIB = 10 * 1024 * 1024


# ---------------------------------------------------------------------------
# Tallying and percentages
# ---------------------------------------------------------------------------


class TestTally:
    def test_root_level_files(self, tenant, write):
        write(tenant, "a.py", "import os")
        write(tenant, "b.js", "nezha")

        result = walk(tenant)

        assert result.percentages == {".py": 50.0, ".js": 50.0}
        assert result.file_flags == {str(tenant / "b.js"): [NEZHA_FLAG]}
        assert str(tenant / "a.py") not in result.file_flags
        assert result.total_files == 2
        assert not result.failed

    def test_percentages_sum_to_100(self, tenant, write):
        for rel in ["a.txt", "b.txt", "c.json", "d/e.txt", "d/f.md", "g", "h/i/j.yml"]:
            write(tenant, rel, "plain")

        result = walk(tenant)

        assert sum(result.percentages.values()) == pytest.approx(100.0, abs=1e-9)
        assert result.percentages[".txt"] == pytest.approx(3 / 7 * 100)
        assert result.percentages[""] == pytest.approx(1 / 7 * 100)

    def test_all_files_are_counted(self, tenant, write):
        write(tenant, "server.jar", b"\x00\x01")
        write(tenant, "config.yml", "a: 1")

        result = walk(tenant)

        assert result.percentages == {".jar": 50.0, ".yml": 50.0}
        assert result.file_flags == {}

    def test_only_inspected_extensions_are_read(self, tenant, write):
        write(tenant, "notes.txt", "nezha")
        write(tenant, "start.sh", "nezha")

        assert walk(tenant).file_flags == {}

    def test_shell_rule_needs_sh_in_inspected_extensions(self, tenant, write):
        write(tenant, "start.sh", "echo hi")
        config = AuditConfig(inspected_extensions=(".js", ".py", ".sh"))

        assert walk(tenant).file_flags == {}
        assert walk(tenant, config=config).file_flags == {
            str(tenant / "start.sh"): [SHELL_SCRIPT_FLAG]
        }

    def test_empty_directory(self, tenant):
        result = walk(tenant)

        assert result == WalkResult()
        assert result.percentages == {}

    def test_chinese_content_flagged(self, tenant, write):
        write(tenant, "c.py", "你好".encode("utf-8"))

        result = walk(tenant)

        assert result.file_flags == {str(tenant / "c.py"): [HAN_FLAG]}

    def test_relative_root_gives_absolute_paths(self, tenant, write, monkeypatch):
        write(tenant, "b.js", "nezha")
        monkeypatch.chdir(tenant.parent)

        result = walk(tenant.name)

        assert list(result.file_flags) == [os.path.join(os.getcwd(), tenant.name, "b.js")]


# ---------------------------------------------------------------------------
# Exclusion rules
# ---------------------------------------------------------------------------


class TestExclusion:
    @pytest.mark.parametrize("dirname", ["node_modules", "plugins", "assets", ".git", "?cache"])
    def test_excluded_subtree_contributes_nothing(self, tenant, write, dirname):
        write(tenant, f"{dirname}/x.js", "nezha")
        write(tenant, f"{dirname}/deep/y.py", "nezha")

        result = walk(tenant)

        assert result.percentages == {}
        assert result.file_flags == {}
        assert result.total_files == 0
        assert result.folder_flags == {str(tenant / dirname)}

    def test_excluded_files_are_never_read(self, tenant, write):
        write(tenant, "node_modules/x.js", "nezha")

        with patch.object(walker, "read_file_with_limit") as read:
            walk(tenant)

        read.assert_not_called()

    def test_nested_excluded_dir(self, tenant, write):
        write(tenant, "src/app.js", "ok")
        write(tenant, "src/node_modules/lib.js", "nezha")

        result = walk(tenant)

        assert result.percentages == {".js": 100.0}
        assert result.folder_flags == {str(tenant / "src" / "node_modules")}

    def test_file_named_like_excluded_dir_is_counted(self, tenant, write):
        write(tenant, "plugins", "not a directory")

        result = walk(tenant)

        assert result.percentages == {"": 100.0}
        assert result.folder_flags == set()

    def test_root_itself_is_never_excluded(self, tmp_path, write):
        root = tmp_path / "node_modules"
        write(root, "x.js", "nezha")

        result = walk(root)

        assert result.file_flags == {str(root / "x.js"): [NEZHA_FLAG]}


# ---------------------------------------------------------------------------
# Size cap and unreadable files
# ---------------------------------------------------------------------------


class TestSizeCap:
    def test_file_over_10_mib_is_tallied_not_flagged(self, tenant, write, caplog):
        big = write(tenant, "big.js", b"nezha" + b"x" * (TEN_MIB + 1 - 5))
        assert big.stat().st_size == TEN_MIB + 1
        write(tenant, "small.py", "import os")

        with caplog.at_level(logging.WARNING, logger="tenant_audit"):
            result = walk(tenant)

        assert result.percentages == {".js": 50.0, ".py": 50.0}
        assert result.file_flags == {}
        assert "too large" in result.skipped[str(big)]
        assert any(str(big) in rec.getMessage() for rec in caplog.records)

    def test_custom_cap(self, tenant, write):
        write(tenant, "a.js", "nezha" + "x" * 2048)
        config = AuditConfig(max_file_size_mb=1 / 1024)  # 1 KiB

        result = walk(tenant, config=config)

        assert result.file_flags == {}
        assert str(tenant / "a.js") in result.skipped

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_file_not_followed_by_default(self, tmp_path, tenant, write):
        target = write(tmp_path, "outside/secret.js", "nezha")
        (tenant / "link.js").symlink_to(target)

        result = walk(tenant)

        assert result.percentages == {".js": 100.0}
        assert result.file_flags == {}
        assert result.skipped == {str(tenant / "link.js"): "symlink not followed"}

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_file_followed_when_enabled(self, tmp_path, tenant, write):
        target = write(tmp_path, "outside/secret.js", "nezha")
        (tenant / "link.js").symlink_to(target)

        result = walk(tenant, config=AuditConfig(follow_symlinks=True))

        assert result.file_flags == {str(tenant / "link.js"): [NEZHA_FLAG]}


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="named pipes unsupported")
class TestSpecialFiles:
    def test_named_pipe_is_neither_tallied_nor_opened(self, tenant, write, caplog):
        write(tenant, "a.py", "print(1)")
        os.mkfifo(tenant / "pipe.js")

        with caplog.at_level(logging.WARNING, logger="tenant_audit"):
            result = walk(tenant)

        assert result.percentages == {".py": 100.0}
        assert result.total_files == 1
        assert result.file_flags == {}
        assert result.skipped == {str(tenant / "pipe.js"): "not a regular file"}
        assert "not a regular file" in caplog.text

    def test_symlink_to_named_pipe_is_not_read(self, tmp_path, tenant):
        fifo = tmp_path / "outside.fifo"
        os.mkfifo(fifo)
        (tenant / "link.js").symlink_to(fifo)

        result = walk(tenant, config=AuditConfig(follow_symlinks=True))

        assert result.percentages == {".js": 100.0}
        assert result.file_flags == {}
        assert result.skipped == {str(tenant / "link.js"): "not a regular file"}


# ---------------------------------------------------------------------------
# Merge step
# ---------------------------------------------------------------------------


class TestMerge:
    def test_flagged_subdir_is_rewalked_and_added(self, tenant, write):
        write(tenant, "a.txt", "plain")
        write(tenant, "sub/x.js", "nezha")
        write(tenant, "sub/y.txt", "plain")

        result = walk(tenant)

        # own walk: .txt 2/3, .js 1/3; sub re-walk: .txt 1/2, .js 1/2
        assert result.percentages[".txt"] == pytest.approx(200 / 3 + 50)
        assert result.percentages[".js"] == pytest.approx(100 / 3 + 50)
        assert result.file_flags == {str(tenant / "sub" / "x.js"): [NEZHA_FLAG]}
        assert result.total_files == 3

    def test_rewalk_runs_once_per_flagged_file(self, tenant, write):
        write(tenant, "a.txt", "plain")
        write(tenant, "sub/x.js", "nezha")
        write(tenant, "sub/z.py", "nezha")

        result = walk(tenant)

        third = 100 / 3
        assert result.percentages[".txt"] == pytest.approx(third)
        assert result.percentages[".js"] == pytest.approx(third + 2 * 50)
        assert result.percentages[".py"] == pytest.approx(third + 2 * 50)

    def test_root_level_flag_triggers_no_rewalk(self, tenant, write):
        write(tenant, "b.js", "nezha")

        with patch.object(walker, "walk", wraps=walker.walk) as spy:
            walker.walk(tenant)

        assert spy.call_count == 1

    def test_merged_folder_flags_are_unioned(self, tenant, write):
        write(tenant, "sub/x.js", "nezha")
        write(tenant, "sub/.cache/y.js", "nezha")

        result = walk(tenant)

        assert result.folder_flags == {str(tenant / "sub" / ".cache")}
        assert list(result.file_flags) == [str(tenant / "sub" / "x.js")]

    def test_rewalk_disabled_counts_each_file_once(self, tenant, write):
        write(tenant, "a.txt", "plain")
        write(tenant, "sub/x.js", "nezha")
        write(tenant, "sub/z.py", "nezha")

        result = walk(tenant, config=AuditConfig(rewalk_flagged_dirs=False))

        assert sum(result.percentages.values()) == pytest.approx(100.0)
        assert len(result.file_flags) == 2

    def test_merge_adds_percentages_without_renormalizing(self):
        parent = WalkResult(percentages={".js": 50.0, ".py": 50.0}, file_flags={"/a": ["x"]})
        child = WalkResult(
            percentages={".js": 100.0},
            file_flags={"/a": ["y"], "/b": ["z"]},
            folder_flags={"/c"},
        )

        parent.merge(child)

        assert parent.percentages == {".js": 150.0, ".py": 50.0}
        assert parent.file_flags == {"/a": ["y"], "/b": ["z"]}
        assert parent.folder_flags == {"/c"}


# ---------------------------------------------------------------------------
# Depth bound
# ---------------------------------------------------------------------------


class TestDepthBound:
    def test_walk_beyond_max_depth_returns_empty(self, tenant, write):
        write(tenant, "b.js", "nezha")

        result = walk(tenant, depth=4)

        assert result == WalkResult()
        assert not result.failed

    def test_walk_at_max_depth_still_runs(self, tenant, write):
        write(tenant, "b.js", "nezha")

        assert walk(tenant, depth=3).file_flags

    def test_recursion_stops_one_past_max_depth(self, tenant, write):
        write(tenant, "a/f.js", "nezha")
        write(tenant, "a/b/g.js", "nezha")
        write(tenant, "a/b/c/h.js", "nezha")

        with patch.object(walker, "walk", wraps=walker.walk) as spy:
            walker.walk(tenant)

        depths = [c.args[1] for c in spy.call_args_list[1:]]
        assert max(depths) == 4
        assert sorted(depths) == [2, 2, 2, 3, 3, 3, 4]

    def test_lower_max_depth(self, tenant, write):
        write(tenant, "sub/x.js", "nezha")

        result = walk(tenant, config=AuditConfig(max_depth=1))

        # the depth-2 re-walk is cut off, so percentages stay normalized
        assert sum(result.percentages.values()) == pytest.approx(100.0)
        assert result.file_flags


# ---------------------------------------------------------------------------
# Failure handling
# ---------------------------------------------------------------------------


class TestFailure:
    def test_missing_root_fails(self, tmp_path, caplog):
        with caplog.at_level(logging.ERROR, logger="tenant_audit"):
            result = walk(tmp_path / "missing")

        assert result.failed
        assert result.error
        assert result.percentages == {}
        assert result.file_flags == {}
        assert caplog.records

    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        reason="permission checks are bypassed for root",
    )
    def test_unreadable_subdir_discards_partial_results(self, tenant, write):
        write(tenant, "b.js", "nezha")
        locked = tenant / "locked"
        locked.mkdir()
        locked.chmod(0)
        try:
            result = walk(tenant)
        finally:
            locked.chmod(0o755)

        assert result.failed
        assert result.file_flags == {}

    def test_listing_error_mid_walk_discards_partial_results(self, tenant, write):
        write(tenant, "b.js", "nezha")
        write(tenant, "sub/c.py", "nezha")
        real_scandir = os.scandir

        def failing_scandir(path):
            if os.path.basename(path) == "sub":
                raise PermissionError(13, "Permission denied", path)
            return real_scandir(path)

        with patch("os.scandir", side_effect=failing_scandir):
            result = walk(tenant)

        assert result.failed
        assert "Permission denied" in result.error
        assert result.file_flags == {}

    def test_failed_nested_walk_is_not_merged(self, tenant, write):
        write(tenant, "sub/x.js", "nezha")
        real_walk = walker.walk

        def fake_walk(root, depth=1, config=walker.DEFAULT_CONFIG):
            if depth > 1:
                return WalkResult.failure("gone")
            return real_walk(root, depth, config)

        with patch.object(walker, "walk", side_effect=fake_walk):
            result = walker.walk(tenant)

        assert not result.failed
        assert result.percentages == {".js": 100.0}
