"""
Configuration tests: model validation, YAML loading and command line merging.
"""
import pytest
from pydantic import ValidationError

from schedule_copy.config import CopyConfig, build_config, load_config


class TestCopyConfig:
    def test_minimal_config(self):
        config = CopyConfig(sources=["/data"], destination="/backup")
        assert config.verbose == 0
        assert config.parallel_threads is None
        assert config.cron_expr is None
        assert not config.is_scheduled

    def test_requires_a_source(self):
        with pytest.raises(ValidationError):
            CopyConfig(sources=[], destination="/backup")

    def test_verbose_above_four_is_rejected(self):
        with pytest.raises(ValidationError, match="4 < 5 number of verbose"):
            CopyConfig(sources=["/data"], destination="/backup", verbose=5)

    @pytest.mark.parametrize("threads", [0, -2])
    def test_parallel_threads_must_be_positive(self, threads):
        with pytest.raises(ValidationError):
            CopyConfig(sources=["/data"], destination="/backup", parallel_threads=threads)

    def test_duplicated_sources(self):
        with pytest.raises(ValidationError, match="duplicated paths"):
            CopyConfig(sources=["/data", "/data"], destination="/backup")

    @pytest.mark.parametrize(
        "expr", ["*/5 * * * *", "0 2 * * 1-5", "0 30 2 * * *", "*/10 * * * * *"]
    )
    def test_valid_cron_expressions(self, expr):
        config = CopyConfig(sources=["/data"], destination="/backup", cron_expr=expr)
        assert config.is_scheduled

    @pytest.mark.parametrize("expr", ["* * *", "61 * * * *", "every day", "0 0 0 0 0 0 0"])
    def test_invalid_cron_expressions(self, expr):
        with pytest.raises(ValidationError):
            CopyConfig(sources=["/data"], destination="/backup", cron_expr=expr)

    def test_cron_expression_is_stripped(self):
        config = CopyConfig(
            sources=["/data"], destination="/backup", cron_expr="  0 * * * *  "
        )
        assert config.cron_expr == "0 * * * *"


class TestLoadConfig:
    def test_load_with_aliases(self, tmp_path):
        config_file = tmp_path / "copy.yaml"
        config_file.write_text(
            "from:\n  - /a\n  - /b\nto: /backup\nverbose: 2\nthreads: 3\ncron: '0 * * * *'\n"
        )

        data = load_config(str(config_file))

        assert data == {
            "sources": ["/a", "/b"],
            "destination": "/backup",
            "verbose": 2,
            "parallel_threads": 3,
            "cron_expr": "0 * * * *",
        }

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_empty_file(self, tmp_path):
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        with pytest.raises(ValueError, match="empty"):
            load_config(str(config_file))

    def test_not_a_mapping(self, tmp_path):
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- /a\n- /b\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(str(config_file))

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "broken.yaml"
        config_file.write_text("from: [/a\nto: /b\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(str(config_file))


class TestBuildConfig:
    def test_command_line_wins(self):
        file_data = {"sources": ["/a"], "destination": "/backup", "verbose": 1}
        config = build_config(file_data, {"destination": "/other", "verbose": 3})
        assert config.sources == ["/a"]
        assert config.destination == "/other"
        assert config.verbose == 3

    def test_unset_flags_keep_file_values(self):
        file_data = {
            "sources": ["/a"],
            "destination": "/backup",
            "verbose": 2,
            "dry_run": True,
        }
        overrides = {
            "sources": [],
            "destination": None,
            "verbose": 0,
            "dry_run": False,
            "cron_expr": None,
        }
        config = build_config(file_data, overrides)
        assert config.sources == ["/a"]
        assert config.verbose == 2
        assert config.dry_run is True

    def test_without_file(self):
        config = build_config(None, {"sources": ["/a"], "destination": "/b"})
        assert config.source_paths[0].name == "a"

    def test_invalid_settings_raise_value_error(self):
        with pytest.raises(ValueError, match="number of verbose"):
            build_config(None, {"sources": ["/a"], "destination": "/b", "verbose": 7})

    def test_missing_destination(self):
        with pytest.raises(ValueError):
            build_config(None, {"sources": ["/a"]})
