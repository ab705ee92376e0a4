"""Tests for CLI entry point.

Tests the command-line interface and argument parsing.
"""

import json
from unittest.mock import MagicMock, patch

import httpx
import pytest

from s3lite.cli import main, parse_args, parse_fields
from s3lite.config import ConfigError
from s3lite.errors import S3Error
from s3lite.models import ClientConfig, Credentials


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(
        bucket_name="mybucket",
        credentials=Credentials("test-access-key", "test-secret-key"),
    )


@pytest.fixture
def mock_client():
    """Patch S3Client so commands run against a mock handle."""
    with patch("s3lite.cli.S3Client") as mock_client_class:
        client = MagicMock()
        client.__enter__.return_value = client
        mock_client_class.return_value = client
        yield client


class TestParseArgs:
    """Tests for argument parsing."""

    def test_default_args(self):
        args = parse_args(["exists", "key"])

        assert args.config == "s3lite.json"
        assert args.profile is None
        assert args.verbose is False
        assert args.command == "exists"
        assert args.key == "key"

    def test_global_options(self):
        args = parse_args(["-c", "custom.json", "--profile", "backup", "-v", "head", "key"])

        assert args.config == "custom.json"
        assert args.profile == "backup"
        assert args.verbose is True

    def test_presign_defaults(self):
        args = parse_args(["presign", "foo/bar"])

        assert args.method == "GET"
        assert args.expires == 3600
        assert args.insecure is False

    def test_presign_options(self):
        args = parse_args(["presign", "foo/bar", "--method", "PUT", "--expires", "60", "--insecure"])

        assert args.method == "PUT"
        assert args.expires == 60
        assert args.insecure is True

    def test_form_upload_repeated_fields(self):
        args = parse_args([
            "form-upload", "k", "--policy", "p.json",
            "--field", "a=1", "--field", "a=2",
        ])

        assert args.acl == "private"
        assert args.field == ["a=1", "a=2"]

    def test_form_upload_rejects_unknown_acl(self):
        with pytest.raises(SystemExit):
            parse_args(["form-upload", "k", "--policy", "p.json", "--acl", "everyone"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_args([])


class TestParseFields:
    """Tests for parse_fields function."""

    def test_groups_repeated_names(self):
        assert parse_fields(["a=1", "b=2", "a=3"]) == {"a": ["1", "3"], "b": ["2"]}

    def test_value_may_contain_equals(self):
        assert parse_fields(["redirect=https://x/?a=b"]) == {"redirect": ["https://x/?a=b"]}

    def test_missing_separator_raises(self):
        with pytest.raises(ValueError, match="NAME=VALUE"):
            parse_fields(["novalue"])


class TestMain:
    """Tests for main entry point."""

    @patch("s3lite.cli.load_config")
    def test_main_returns_2_on_config_error(self, mock_load):
        mock_load.side_effect = ConfigError("No configuration found")

        assert main(["exists", "key"]) == 2

    @patch("s3lite.cli.load_config")
    def test_main_loads_config(self, mock_load, mock_client):
        main(["-c", "test.json", "--profile", "p", "delete", "key"])

        mock_load.assert_called_once_with("test.json", "p")

    @patch("s3lite.presign.time.time", return_value=1699996400.0)
    @patch("s3lite.cli.load_config")
    def test_presign_prints_url(self, mock_load, mock_time, client_config, capsys):
        mock_load.return_value = client_config

        result = main(["presign", "/foo/bar"])

        output = capsys.readouterr().out.strip()
        url = httpx.URL(output)
        assert result == 0
        assert url.path == "/mybucket/foo/bar"
        assert url.params["Signature"] == "C9Mzz4NGZkLG7CzjyRTRlfnJJAc="

    @patch("s3lite.cli.load_config")
    def test_form_upload_prints_url(self, mock_load, client_config, tmp_path, capsys):
        mock_load.return_value = client_config
        policy_file = tmp_path / "policy.json"
        policy_file.write_text(json.dumps({"conditions": [{"bucket": "mybucket"}]}))

        result = main([
            "form-upload", "uploads/a.txt",
            "--policy", str(policy_file),
            "--acl", "public-read",
            "--field", "x-amz-meta-tag=red",
            "--field", "x-amz-meta-tag=blue",
        ])

        url = httpx.URL(capsys.readouterr().out.strip())
        assert result == 0
        assert url.params["acl"] == "public-read"
        assert url.params["key"] == "uploads/a.txt"
        assert url.params.get_list("x-amz-meta-tag") == ["red", "blue"]

    @patch("s3lite.cli.load_config")
    def test_form_upload_bad_field_returns_2(self, mock_load, client_config, tmp_path):
        mock_load.return_value = client_config
        policy_file = tmp_path / "policy.json"
        policy_file.write_text("{}")

        result = main(["form-upload", "k", "--policy", str(policy_file), "--field", "oops"])

        assert result == 2

    @patch("s3lite.cli.load_config")
    def test_exists_true(self, mock_load, mock_client, capsys):
        mock_client.object.return_value.exists.return_value = True

        result = main(["exists", "key"])

        assert result == 0
        assert capsys.readouterr().out.strip() == "true"
        mock_client.object.assert_called_once_with("key")

    @patch("s3lite.cli.load_config")
    def test_exists_false(self, mock_load, mock_client, capsys):
        mock_client.object.return_value.exists.return_value = False

        result = main(["exists", "key"])

        assert result == 1
        assert capsys.readouterr().out.strip() == "false"

    @patch("s3lite.cli.load_config")
    def test_delete(self, mock_load, mock_client):
        assert main(["delete", "key"]) == 0

        mock_client.object.return_value.delete.assert_called_once()

    @patch("s3lite.cli.load_config")
    def test_store_error_returns_1(self, mock_load, mock_client, capsys):
        mock_client.object.return_value.delete.side_effect = S3Error(403, "Forbidden")

        result = main(["delete", "key"])

        assert result == 1
        assert "403 Forbidden" in capsys.readouterr().err

    @patch("s3lite.cli.load_config")
    def test_network_error_returns_1(self, mock_load, mock_client):
        mock_client.object.return_value.exists.side_effect = httpx.ConnectError("refused")

        assert main(["exists", "key"]) == 1

    @patch("s3lite.cli.load_config")
    def test_get_writes_file(self, mock_load, mock_client, tmp_path):
        response = MagicMock()
        response.iter_bytes.return_value = iter([b"hello ", b"world"])
        mock_client.object.return_value.reader.return_value = (response, {})
        output = tmp_path / "out.txt"

        result = main(["get", "key", "-o", str(output)])

        assert result == 0
        assert output.read_bytes() == b"hello world"
        response.close.assert_called_once()
