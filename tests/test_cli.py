"""
Tests for the fieldgen command line interface.
"""

import json

import pytest
import yaml


@pytest.fixture
def model_file(tmp_path, lambda_style_model):
    path = tmp_path / "model.yaml"
    path.write_text(yaml.dump(lambda_style_model, sort_keys=False))
    return path


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "generator.yaml"
    path.write_text(yaml.dump({
        "resources": {
            "Foo": {
                "fields": {
                    "CodeLocation": {
                        "is_read_only": True,
                        "from": {"operation": "GetFoo", "path": "Code.Location"},
                        "print": {"name": "LOCATION", "priority": 1},
                    },
                    "Name": {"print": {}},
                },
            },
        },
    }, sort_keys=False))
    return path


class TestResolveCommand:
    """Tests for `fieldgen resolve`."""

    def test_json_output(self, model_file, config_file, capsys):
        """Should print the resolved field set as JSON and exit 0."""
        from fieldgen.__main__ import main

        exit_code = main([
            "resolve", "--shapes", str(model_file), "--config", str(config_file),
            "--resource", "Foo", "--format", "json",
        ])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["resource"] == "Foo"
        assert [f["name"] for f in output["fields"]] == [
            "Name", "CodeImageUri", "CodeS3Bucket", "CodeLocation",
        ]
        location = output["fields"][-1]
        assert location["slot"] == "Status"
        assert location["provenance"]["slot"] == "explicit"

    def test_table_output(self, model_file, config_file, capsys):
        """Should print a table with slots, types and flags."""
        from fieldgen.__main__ import main

        exit_code = main([
            "resolve", "--shapes", str(model_file), "--config", str(config_file),
            "--resource", "Foo",
        ])

        assert exit_code == 0
        out = capsys.readouterr().out
        assert out.splitlines()[0].startswith("FIELD")
        assert "primary-key" in out
        assert "CodeLocation" in out

    def test_diagnostics_go_to_stderr(self, model_file, config_file, capsys):
        """Should print informational diagnostics to stderr."""
        from fieldgen.__main__ import main

        main([
            "resolve", "--shapes", str(model_file), "--config", str(config_file),
            "--resource", "Foo", "--format", "json",
        ])

        err = capsys.readouterr().err
        assert "member_decomposed" in err

    def test_resolution_failure_exits_1(self, model_file, tmp_path, capsys):
        """Should exit 1 and print errors when resolution fails."""
        from fieldgen.__main__ import main

        empty_config = tmp_path / "empty.yaml"
        empty_config.write_text("resources: {}\n")

        exit_code = main([
            "resolve", "--shapes", str(model_file), "--config", str(empty_config),
            "--resource", "Foo",
        ])

        assert exit_code == 1
        assert "type_ambiguity" in capsys.readouterr().err

    def test_load_error_exits_2(self, tmp_path, capsys):
        """Should exit 2 when the shape graph cannot be loaded."""
        from fieldgen.__main__ import main

        exit_code = main([
            "resolve", "--shapes", str(tmp_path / "missing.yaml"), "--resource", "Foo",
        ])

        assert exit_code == 2
        assert "not found" in capsys.readouterr().err

    def test_malformed_shape_document_exits_2(self, tmp_path, capsys):
        """Should exit 2 when an operation references its shapes by something other than a name."""
        from fieldgen.__main__ import main

        model = tmp_path / "model.yaml"
        model.write_text(yaml.dump({
            "shapes": {"In": {"members": {"X": "string"}}},
            "operations": [{"name": "CreateFoo", "input": ["In"]}],
        }))

        exit_code = main(["resolve", "--shapes", str(model), "--resource", "Foo"])

        assert exit_code == 2
        assert "by name" in capsys.readouterr().err

    def test_uses_local_generator_yaml(self, model_file, config_file, monkeypatch, capsys):
        """Should pick up generator.yaml from the working directory."""
        from fieldgen.__main__ import main

        monkeypatch.chdir(config_file.parent)

        exit_code = main([
            "resolve", "--shapes", str(model_file), "--resource", "Foo", "--format", "json",
        ])

        assert exit_code == 0
        assert "CodeLocation" in capsys.readouterr().out


class TestColumnsCommand:
    """Tests for `fieldgen columns`."""

    def test_standard_columns(self, model_file, config_file, capsys):
        """Should print standard-view headers only."""
        from fieldgen.__main__ import main

        exit_code = main([
            "columns", "--shapes", str(model_file), "--config", str(config_file),
            "--resource", "Foo",
        ])

        assert exit_code == 0
        assert capsys.readouterr().out.strip().split("\t") == ["NAME", "Name", "AGE"]

    def test_wide_columns(self, model_file, config_file, capsys):
        """Should include wide-view headers with --wide."""
        from fieldgen.__main__ import main

        main([
            "columns", "--shapes", str(model_file), "--config", str(config_file),
            "--resource", "Foo", "--wide",
        ])

        assert capsys.readouterr().out.strip().split("\t") == [
            "NAME", "Name", "LOCATION", "AGE",
        ]
