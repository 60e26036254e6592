"""Tests for locating dataflows in scripts and modules."""

from pathlib import Path

import pytest

from dagflow import Dataflow
from dagflow._cli.discover import _script_module_name, load_flow, load_flow_from_script


class TestScriptModuleName:
    def test_plain_script(self, tmp_path: Path) -> None:
        script = tmp_path / "graph.py"
        script.write_text("")

        assert _script_module_name(script) == ("graph", tmp_path.resolve())

    def test_script_inside_package(self, tmp_path: Path) -> None:
        package = tmp_path / "pkg" / "sub"
        package.mkdir(parents=True)
        (tmp_path / "pkg" / "__init__.py").write_text("")
        (package / "__init__.py").write_text("")
        script = package / "graph.py"
        script.write_text("")

        assert _script_module_name(script) == ("pkg.sub.graph", tmp_path.resolve())

    def test_package_init(self, tmp_path: Path) -> None:
        package = tmp_path / "pkg"
        package.mkdir()
        init = package / "__init__.py"
        init.write_text("")

        assert _script_module_name(init) == ("pkg", tmp_path.resolve())


class TestLoadFlow:
    def test_first_dataflow_in_definition_order(self, tmp_path: Path) -> None:
        script = tmp_path / "discover_order.py"
        script.write_text(
            "import dagflow\n\nzeta = dagflow.Dataflow({'z': lambda x: x})\nalpha = dagflow.Dataflow()\n",
        )

        flow = load_flow_from_script(script)

        assert flow.nodes == ("z",)

    def test_named_dataflow(self, tmp_path: Path) -> None:
        script = tmp_path / "discover_named.py"
        script.write_text("import dagflow\n\nfirst = dagflow.Dataflow()\nsecond = dagflow.Dataflow({'y': lambda x: x})\n")

        assert load_flow(str(script), "second").nodes == ("y",)

    def test_missing_name(self, tmp_path: Path) -> None:
        script = tmp_path / "discover_missing.py"
        script.write_text("import dagflow\n\nflow = dagflow.Dataflow()\n")

        with pytest.raises(ValueError, match="no dataflow named 'other'"):
            load_flow_from_script(script, "other")

    def test_module_reference(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "discover_module.py").write_text("import dagflow\n\ngraph = dagflow.Dataflow({'y': lambda x: x})\n")
        monkeypatch.syspath_prepend(str(tmp_path))

        flow = load_flow("discover_module:graph")

        assert isinstance(flow, Dataflow)
        assert flow.nodes == ("y",)

    def test_module_reference_wrong_type(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "discover_wrong.py").write_text("graph = 42\n")
        monkeypatch.syspath_prepend(str(tmp_path))

        with pytest.raises(TypeError, match="not a Dataflow"):
            load_flow("discover_wrong:graph")

    def test_neither_file_nor_reference(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="module.path:variable"):
            load_flow(str(tmp_path / "missing.py"))
