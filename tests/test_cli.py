"""End-to-end tests of the command line entry point."""

import shutil
from unittest.mock import patch

import pytest

import ebuilder
from constants import ExitCodes
from registry.maven import EffectivePomError

CACHE = """\
    1.1
    #category:pkg:version:slot:useFlag:groupId:artifactId:mavenVersion:javaEclass
    dev-java:junit:4.11:4::junit:junit:4.11:java-pkg-2
    dev-java:junit:4.13:4::junit:junit:4.13:java-pkg-2
    dev-java:hamcrest-core:1.3-r2:1.3::org.hamcrest:hamcrest-core:1.3:java-pkg-2
    dev-java:ant-core:1.10.14:0:::::ant-tasks
"""

POM = """\
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <properties><maven.compiler.source>1.7</maven.compiler.source></properties>
  <dependencies>
    <dependency>
      <groupId>junit</groupId><artifactId>junit</artifactId><version>4.12</version><scope>test</scope>
    </dependency>
    <dependency>
      <groupId>org.unknown</groupId><artifactId>thing</artifactId><version>1.0</version>
    </dependency>
  </dependencies>
</project>
"""


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Leave the root logger to pytest's capture handlers."""
    with patch("ebuilder.configure_logging"):
        yield


def _run(argv):
    with pytest.raises(SystemExit) as exc_info:
        ebuilder.main(argv)
    return exc_info.value.code


@pytest.fixture
def cache_path(write_cache):
    return write_cache(CACHE)


@pytest.fixture
def pom_dir(tmp_path):
    directory = tmp_path / "project"
    directory.mkdir()
    (directory / "pom.xml").write_text(POM, encoding="utf-8")
    return directory


class TestRefresh:
    """``refresh`` command."""

    def test_writes_cache(self, portage_tree, tmp_path):
        root = portage_tree({
            "dev-java/junit/junit-4.13.ebuild": """\
                inherit java-pkg-2
                MAVEN_ID="junit:junit:4.13"
                SLOT="4"
            """,
        })
        cache_file = tmp_path / "out" / "cache"
        assert _run(["refresh", "-t", str(root), "--cache-file", str(cache_file)]) == ExitCodes.SUCCESS.value
        lines = cache_file.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "1.1"
        assert lines[2] == "dev-java:junit:4.13:4::junit:junit:4.13:java-pkg-2"

    def test_missing_tree(self, tmp_path):
        code = _run(["refresh", "-t", str(tmp_path / "missing"), "--cache-file", str(tmp_path / "cache")])
        assert code == ExitCodes.FILE_ERROR.value
        assert not (tmp_path / "cache").exists()

    def test_malformed_ebuild_keeps_old_cache(self, portage_tree, write_cache):
        cache_file = write_cache(CACHE)
        root = portage_tree({
            "dev-java/foo/foo-1.0.ebuild": """\
                inherit java-pkg-2
                MAVEN_ID="org.foo:foo:1.0"
                MAVEN_PROVIDES="broken"
            """,
        })
        assert _run(["refresh", "-t", str(root), "--cache-file", cache_file]) == ExitCodes.DATA_ERROR.value
        with open(cache_file, encoding="utf-8") as handle:
            assert "hamcrest-core" in handle.read()

    def test_unreadable_ebuild_keeps_old_cache(self, portage_tree, write_cache):
        cache_file = write_cache(CACHE)
        with open(cache_file, encoding="utf-8") as handle:
            before = handle.read()
        root = portage_tree({
            "dev-java/junit/junit-4.13.ebuild": """\
                inherit java-pkg-2
                MAVEN_ID="junit:junit:4.13"
            """,
        })
        with patch("repository.scanner.parse_ebuild", side_effect=PermissionError(13, "Permission denied")):
            code = _run(["refresh", "-t", str(root), "--cache-file", cache_file])
        assert code == ExitCodes.FILE_ERROR.value
        with open(cache_file, encoding="utf-8") as handle:
            assert handle.read() == before


class TestResolve:
    """``resolve`` command."""

    def test_resolves(self, cache_path, capsys):
        code = _run(["resolve", "--cache-file", cache_path, "junit:junit:4.12", "org.hamcrest:hamcrest-core:1.1"])
        assert code == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out.splitlines() == [
            "junit:junit:4.12 -> >=dev-java/junit-4.13:4",
            "org.hamcrest:hamcrest-core:1.1 -> >=dev-java/hamcrest-core-1.3:1.3",
        ]

    def test_unresolved_is_reported(self, cache_path, capsys):
        code = _run(["resolve", "--cache-file", cache_path, "junit:junit:5.0", "org.nope:nope:1"])
        assert code == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out.splitlines() == [
            "junit:junit:5.0 -> !!!suitable-mavenVersion-not-found!!!",
            "org.nope:nope:1 -> !!!groupId-not-found!!!",
        ]

    def test_error_on_warnings(self, cache_path):
        code = _run(["resolve", "--cache-file", cache_path, "--error-on-warnings", "junit:junit:5.0"])
        assert code == ExitCodes.EXIT_WARNINGS.value

    def test_malformed_coordinate(self, cache_path):
        assert _run(["resolve", "--cache-file", cache_path, "junit:junit"]) == ExitCodes.DATA_ERROR.value

    def test_invalid_version(self, cache_path):
        assert _run(["resolve", "--cache-file", cache_path, "junit:junit:latest"]) == ExitCodes.DATA_ERROR.value

    def test_missing_cache(self, tmp_path, caplog):
        code = _run(["resolve", "--cache-file", str(tmp_path / "missing"), "junit:junit:4.12"])
        assert code == ExitCodes.FILE_ERROR.value
        assert "refresh" in caplog.text

    def test_unsupported_cache(self, write_cache):
        path = write_cache("9.9\n")
        assert _run(["resolve", "--cache-file", path, "junit:junit:4.12"]) == ExitCodes.DATA_ERROR.value

    def test_malformed_cache(self, write_cache):
        path = write_cache("1.1\nnot-a-record\n")
        assert _run(["resolve", "--cache-file", path, "junit:junit:4.12"]) == ExitCodes.DATA_ERROR.value

    def test_cache_file_from_config(self, cache_path, tmp_path, capsys):
        config = tmp_path / "config.yml"
        config.write_text(f"cache_file: {cache_path}\n", encoding="utf-8")
        assert _run(["resolve", "-c", str(config), "junit:junit:4.11"]) == ExitCodes.SUCCESS.value
        assert ">=dev-java/junit-4.11:4" in capsys.readouterr().out

    def test_broken_config(self, tmp_path):
        config = tmp_path / "config.yml"
        config.write_text("cache_file: [\n", encoding="utf-8")
        assert _run(["resolve", "-c", str(config), "junit:junit:4.11"]) == ExitCodes.FILE_ERROR.value


class TestDeps:
    """``deps`` command."""

    def test_direct_pom(self, cache_path, pom_dir, capsys):
        code = _run([
            "deps", "--cache-file", cache_path, "-w", str(pom_dir), "-p", "pom.xml", "--no-effective-pom",
        ])
        assert code == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out.splitlines() == [
            "# pom.xml",
            "test\tjunit:junit:4.12\t>=dev-java/junit-4.13:4",
            "compile\torg.unknown:thing:1.0\t!!!groupId-not-found!!!",
            "# minimum java version: 1.8",
        ]

    def test_error_on_warnings(self, cache_path, pom_dir):
        code = _run([
            "deps", "--cache-file", cache_path, "-w", str(pom_dir), "-p", "pom.xml",
            "--no-effective-pom", "--error-on-warnings",
        ])
        assert code == ExitCodes.EXIT_WARNINGS.value

    def test_forced_java_version(self, cache_path, pom_dir, capsys):
        _run([
            "deps", "--cache-file", cache_path, "-w", str(pom_dir), "-p", "pom.xml",
            "--no-effective-pom", "--force-min-java-version", "17",
        ])
        assert capsys.readouterr().out.splitlines()[-1] == "# minimum java version: 17"

    def test_invalid_forced_java_version(self, cache_path, pom_dir):
        code = _run([
            "deps", "--cache-file", cache_path, "-w", str(pom_dir), "-p", "pom.xml",
            "--no-effective-pom", "--force-min-java-version", "seventeen",
        ])
        assert code == ExitCodes.DATA_ERROR.value

    def test_effective_pom_is_used_and_removed(self, cache_path, pom_dir, tmp_path, capsys):
        effective = tmp_path / "effective.xml"
        shutil.copy(str(pom_dir / "pom.xml"), str(effective))
        with patch("ebuilder.get_effective_pom", return_value=str(effective)) as mock_get:
            code = _run(["deps", "--cache-file", cache_path, "-w", str(pom_dir), "-p", "pom.xml", "--mvn-timeout", "9"])
        assert code == ExitCodes.SUCCESS.value
        mock_get.assert_called_once_with(str(pom_dir / "pom.xml"), workdir=str(pom_dir), timeout=9)
        assert not effective.exists()
        assert "junit:junit:4.12" in capsys.readouterr().out

    def test_mvn_failure(self, cache_path, pom_dir):
        with patch("ebuilder.get_effective_pom", side_effect=EffectivePomError("mvn exited with 1")):
            code = _run(["deps", "--cache-file", cache_path, "-w", str(pom_dir), "-p", "pom.xml"])
        assert code == ExitCodes.EXTERNAL_TOOL_ERROR.value

    def test_missing_pom(self, cache_path, tmp_path):
        code = _run(["deps", "--cache-file", cache_path, "-w", str(tmp_path), "-p", "nope.xml", "--no-effective-pom"])
        assert code == ExitCodes.FILE_ERROR.value

    def test_unparseable_pom(self, cache_path, tmp_path):
        (tmp_path / "pom.xml").write_text("<project>", encoding="utf-8")
        code = _run(["deps", "--cache-file", cache_path, "-w", str(tmp_path), "-p", "pom.xml", "--no-effective-pom"])
        assert code == ExitCodes.DATA_ERROR.value


class TestDumpAndKeywords:
    """``dump`` and ``keywords`` commands."""

    def test_dump_all(self, cache_path, capsys):
        assert _run(["dump", "--cache-file", cache_path]) == ExitCodes.SUCCESS.value
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 4
        assert "dev-java:ant-core:1.10.14:0:::::ant-tasks" in lines

    def test_dump_group(self, cache_path, capsys):
        _run(["dump", "--cache-file", cache_path, "-g", "junit"])
        assert capsys.readouterr().out.splitlines() == [
            "dev-java:junit:4.11:4::junit:junit:4.11:java-pkg-2",
            "dev-java:junit:4.13:4::junit:junit:4.13:java-pkg-2",
        ]

    def test_keywords(self, capsys):
        code = _run(["keywords", "-k", "amd64 ~x86 ~amd64-linux", "--keywords=-amd64 x86 ppc-macos"])
        assert code == ExitCodes.SUCCESS.value
        assert capsys.readouterr().out.strip() == "-amd64 x86 ~amd64-linux ppc-macos"


def test_split_coordinate():
    assert ebuilder.split_coordinate("a:b:1.0") == ("a", "b", "1.0")
    assert ebuilder.split_coordinate("a:b") is None
    assert ebuilder.split_coordinate("a::1.0") is None


def test_loglevel_left_to_environment(cache_path):
    with patch("ebuilder.configure_logging") as mock_configure:
        _run(["dump", "--cache-file", cache_path])
    mock_configure.assert_called_once_with(None, None)


def test_loglevel_flag_passed(cache_path):
    with patch("ebuilder.configure_logging") as mock_configure:
        _run(["dump", "--cache-file", cache_path, "--loglevel", "DEBUG"])
    mock_configure.assert_called_once_with("DEBUG", None)
