"""Tests for the one-shot descriptor generation script."""

from __future__ import annotations

import importlib.util
import sys
import xml.etree.ElementTree as ET
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from wrigi.upstream import RawAsset, RawRelease

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "generate_descriptor.py"
OWNER = "go-lang-plugin-org"
REPO = "go-lang-idea-plugin"


def load_script():
    spec = importlib.util.spec_from_file_location("generate_descriptor", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def fetch(owner: str, repo: str) -> list[RawRelease]:
    return [
        RawRelease(
            tag="v0.5-alpha",
            body="Fixes",
            assets=(
                RawAsset(
                    created_at="2014-06-01T12:30:00Z",
                    download_url="https://example.com/plugin.zip",
                    size=10,
                    download_count=1,
                ),
            ),
        )
    ]


@pytest.fixture
def script(monkeypatch):
    module = load_script()
    monkeypatch.setattr(module, "GitHubClient", MagicMock())
    monkeypatch.setattr(module, "make_fetcher", lambda client, pages: fetch)
    return module


def run(script, monkeypatch, *args: str) -> int:
    monkeypatch.setattr(sys, "argv", ["generate_descriptor.py", *args])
    return script.main()


class TestGenerateDescriptor:
    def test_writes_xml_file(self, script, monkeypatch, tmp_path, capsys):
        out = tmp_path / "alpha.xml"

        code = run(
            script, monkeypatch,
            OWNER, REPO, "alpha",
            "--config", str(tmp_path / "none.yaml"),
            "--output", str(out),
        )

        assert code == 0
        root = ET.fromstring(out.read_bytes())
        assert root.findtext("category/idea-plugin/version") == "v0.5-alpha"
        assert "Generated descriptor:" in capsys.readouterr().out

    def test_minimal_json_to_stdout(self, script, monkeypatch, tmp_path, capsys):
        code = run(
            script, monkeypatch,
            OWNER, REPO, "alpha",
            "--format", "json",
            "--shape", "minimal",
            "--config", str(tmp_path / "none.yaml"),
        )

        assert code == 0
        assert '"version": "v0.5-alpha"' in capsys.readouterr().out

    def test_unknown_repository(self, script, monkeypatch, tmp_path, capsys):
        code = run(
            script, monkeypatch,
            OWNER, "unknown-repo", "alpha",
            "--config", str(tmp_path / "none.yaml"),
        )

        assert code == 1
        assert "Error:" in capsys.readouterr().err
