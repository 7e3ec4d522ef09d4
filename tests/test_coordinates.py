"""Tests for artifact identity and locations."""

from pathlib import Path

import pytest


class TestSplitFileName:
    """Test file name decomposition."""

    def test_simple_extension(self):
        from remote_artifacts import split_file_name

        assert split_file_name("a.pom") == ("a", "pom")

    def test_no_extension(self):
        from remote_artifacts import split_file_name

        assert split_file_name("README") == ("README", "")

    def test_wrapped_extension_keeps_inner_type_in_id(self):
        from remote_artifacts import split_file_name

        assert split_file_name("data.nii.gz") == ("data.nii", "gz")

    def test_ambiguous_multi_dot_name(self):
        from remote_artifacts import split_file_name

        # Only the final extension is the type, no matter how many dots
        assert split_file_name("report.v2.final.csv") == ("report.v2.final", "csv")
        assert split_file_name("archive.tar.gz") == ("archive.tar", "gz")

    def test_dotfile(self):
        from remote_artifacts import split_file_name

        assert split_file_name(".DS_Store") == ("", "DS_Store")

    def test_uses_base_name_of_path(self, tmp_path):
        from remote_artifacts import split_file_name

        assert split_file_name(tmp_path / "sub.dir" / "file.json") == ("file", "json")


class TestFormatHint:

    def test_wrapped_type_reports_inner_type(self):
        from remote_artifacts.coordinates import inner_type

        assert inner_type("data.nii", "gz") == "nii"
        assert inner_type("data.nii", "GZ") == "nii"

    def test_plain_type_has_no_hint(self):
        from remote_artifacts.coordinates import inner_type

        assert inner_type("data.nii", "json") == ""

    def test_wrapped_type_without_inner_extension(self):
        from remote_artifacts.coordinates import inner_type

        assert inner_type("data", "gz") == ""

    def test_coordinates_format_hint(self):
        from remote_artifacts import ArtifactCoordinates

        coords = ArtifactCoordinates.from_file("scan.nii.gz", "brain")

        assert coords.artifact_id == "scan.nii"
        assert coords.type == "gz"
        assert coords.format_hint == "nii"


class TestArtifactCoordinates:

    def test_defaults(self):
        from remote_artifacts import ArtifactCoordinates

        coords = ArtifactCoordinates(remote_path="ant", artifact_id="ant-commons-logging")

        assert coords.version == "1"
        assert coords.type == ""
        assert coords.file_name == "ant-commons-logging-1"

    def test_from_file_with_explicit_id(self):
        from remote_artifacts import ArtifactCoordinates

        coords = ArtifactCoordinates.from_file("a.pom", "grp", version="2", artifact_id="other")

        assert coords.artifact_id == "other"
        assert coords.type == "pom"
        assert coords.version == "2"

    @pytest.mark.parametrize("remote_path", ["org/example", "org.example", "/org/example/"])
    def test_group_path_and_id(self, remote_path):
        from remote_artifacts import ArtifactCoordinates

        coords = ArtifactCoordinates(remote_path=remote_path, artifact_id="x")

        assert coords.group_path == "org/example"
        assert coords.group_id == "org.example"

    def test_relative_path(self):
        from remote_artifacts import ArtifactCoordinates

        coords = ArtifactCoordinates("ant", "ant-commons-logging", "1.6.5", "pom")

        assert coords.relative_path == (
            "ant/ant-commons-logging/1.6.5/ant-commons-logging-1.6.5.pom"
        )


class TestLocations:

    def test_artifact_url(self):
        from remote_artifacts import ArtifactCoordinates, Configuration, artifact_url

        configuration = Configuration(repository_url="https://repo1.maven.org/maven2/")
        coords = ArtifactCoordinates("ant", "ant-commons-logging", "1.6.5", "pom")

        assert artifact_url(configuration, coords) == (
            "https://repo1.maven.org/maven2/"
            "ant/ant-commons-logging/1.6.5/ant-commons-logging-1.6.5.pom"
        )

    def test_artifact_url_without_trailing_slash(self):
        from remote_artifacts import ArtifactCoordinates, Configuration, artifact_url

        configuration = Configuration(repository_url="http://host/repository/test")
        coords = ArtifactCoordinates("grp", "a", "1", "")

        assert artifact_url(configuration, coords) == "http://host/repository/test/grp/a/1/a-1"

    def test_cache_path_is_deterministic(self, tmp_path):
        from remote_artifacts import ArtifactCoordinates, Configuration, cache_path

        configuration = Configuration(cache_folder=str(tmp_path))
        coords = ArtifactCoordinates("org.example", "data", "3", "json")

        path = cache_path(configuration, coords)

        assert path == tmp_path / "org" / "example" / "data" / "3" / "data-3.json"
        assert cache_path(configuration, ArtifactCoordinates("org/example", "data", "3", "json")) == path

    def test_cache_path_uses_global_cache_dir(self, tmp_path):
        from remote_artifacts import ArtifactCoordinates, Configuration, cache_path, set_cache_dir
        import remote_artifacts.coordinates as module

        original = module._cache_dir
        try:
            set_cache_dir(tmp_path / "global")
            path = cache_path(Configuration(), ArtifactCoordinates("g", "a", "1", "txt"))
            assert path == tmp_path / "global" / "g" / "a" / "1" / "a-1.txt"
        finally:
            module._cache_dir = original

    def test_get_cache_dir_default(self):
        from remote_artifacts import get_cache_dir
        import remote_artifacts.coordinates as module

        if module._cache_dir is None:
            assert get_cache_dir() == Path.home() / ".remote_artifacts"


class TestArtifact:

    def test_build(self, tmp_path):
        from remote_artifacts import Artifact, ArtifactCoordinates, Configuration

        configuration = Configuration(repository_url="http://host/repo")
        coords = ArtifactCoordinates("grp", "a", "1", "pom")

        artifact = Artifact.build(configuration, coords, local_path=tmp_path / "a-1.pom",
                                  description="desc", name="A")

        assert artifact.url == "http://host/repo/grp/a/1/a-1.pom"
        assert artifact.local_path == str(tmp_path / "a-1.pom")
        assert artifact.description == "desc"
        assert artifact.coordinates == coords

    def test_immutable(self):
        from dataclasses import FrozenInstanceError

        from remote_artifacts import Artifact, ArtifactCoordinates, Configuration

        artifact = Artifact.build(Configuration(), ArtifactCoordinates("g", "a"))

        with pytest.raises(FrozenInstanceError):
            artifact.version = "2"
