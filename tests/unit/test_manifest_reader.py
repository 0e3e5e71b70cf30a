"""Tests for the manifest reader — required fields and step defaults."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from libforge.core.errors import ManifestError, MissingManifestFieldError
from libforge.core.manifest_reader import read_fields, read_manifest


class TestReadManifest:
    def test_defaults_applied(self, make_source_dir: Callable[..., Path]):
        source = make_source_dir("name: demo\nversion: 1.0\n")
        manifest = read_manifest(source)
        assert manifest.name == "demo"
        assert manifest.version == "1.0"
        assert manifest.build == "make"
        assert manifest.install == "make install"
        assert manifest.test is None
        assert manifest.install_key == "demo-1.0"

    def test_custom_defaults(self, make_source_dir: Callable[..., Path]):
        source = make_source_dir("name: demo\nversion: 1.0\n")
        manifest = read_manifest(source, default_build="gmake", default_install="gmake install")
        assert manifest.build == "gmake"
        assert manifest.install == "gmake install"

    def test_declared_steps(self, make_source_dir: Callable[..., Path]):
        source = make_source_dir(
            "name: demo\nversion: 2\nbuild: ./build.sh\ntest: ./test.sh\ninstall: ./inst.sh\n"
        )
        manifest = read_manifest(source)
        assert (manifest.build, manifest.test, manifest.install) == (
            "./build.sh",
            "./test.sh",
            "./inst.sh",
        )

    def test_extra_fields_kept(self, make_source_dir: Callable[..., Path]):
        source = make_source_dir("name: demo\nversion: 1\nlicense: MIT\n")
        assert read_manifest(source).extra == {"license": "MIT"}

    @pytest.mark.parametrize(
        "text,missing",
        [
            ("version: 1.0\n", "name"),
            ("name: demo\n", "version"),
            ("name: demo\nversion:\n", "version"),
            ("", "name"),
        ],
    )
    def test_missing_required_field(self, make_source_dir: Callable[..., Path], text: str, missing: str):
        source = make_source_dir(text)
        with pytest.raises(MissingManifestFieldError) as excinfo:
            read_manifest(source)
        assert excinfo.value.field == missing

    def test_missing_manifest_file(self, tmp_dir: Path):
        with pytest.raises(ManifestError):
            read_manifest(tmp_dir)

    def test_undecodable_manifest(self, tmp_dir: Path):
        (tmp_dir / "manifest").write_bytes(b"name: \xff\xfe\n")
        with pytest.raises(ManifestError, match="Cannot read manifest"):
            read_manifest(tmp_dir)

    def test_read_fields_ignores_malformed_lines(self, make_source_dir: Callable[..., Path]):
        source = make_source_dir("name: demo\nnot a field\n\n# note: skipped\nversion: 1\n")
        assert read_fields(source) == {"name": "demo", "version": "1"}
