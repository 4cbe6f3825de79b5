import json
from pathlib import Path

import pytest

from spring_visualizer.errors import ProjectPathError
from spring_visualizer.factory.analyzer_factory import AnalyzerFactory
from spring_visualizer.factory.config_builder import AnalyzerConfigBuilder
from spring_visualizer.analyzers.java_analyzer import JavaCodeAnalyzer
from spring_visualizer.models.domain_models import SourceFile, Stereotype

EXPECTED_NODES = [
    "DaoConfig", "DemoApplication", "ServiceConfig", "MyBean",
    "BarService", "ConstructorInjected", "ConstructorInjection", "FooService", "MissingClient",
]

EXPECTED_RELATIONS = """\
    // Relations
    DemoApplication -> ServiceConfig [label="@Import"];
    ServiceConfig -> DaoConfig [label="@Import"];
    ServiceConfig -> MyBean [label="@Bean"];
    BarService -> MyBean [label="@Autowired"];
    BarService -> ConstructorInjected [label="@Bean"];
    ConstructorInjected -> ConstructorInjected [label="@Autowired (CI)"];
    ConstructorInjection -> ConstructorInjected [label="@Autowired (CI)"];
    FooService -> MissingClient [label="@Autowired"];
}
"""


def test_demo_project_graph(analyzer, demo_sources) -> None:
    graph = analyzer.analyze_sources(demo_sources)
    assert list(graph.nodes) == EXPECTED_NODES
    assert graph.nodes["DemoApplication"].stereotype is Stereotype.SPRING_BOOT_APPLICATION
    assert graph.nodes["ServiceConfig"].stereotype is Stereotype.CONFIGURATION
    assert graph.nodes["BarService"].stereotype is Stereotype.SERVICE
    assert [node.name for node in graph.placeholders()] == ["MyBean", "ConstructorInjected", "MissingClient"]
    assert graph.outgoing("MyBean") == []
    assert graph.outgoing("MissingClient") == []


def test_demo_project_dot(analyzer, demo_sources) -> None:
    text = analyzer.render(analyzer.analyze_sources(demo_sources))
    assert text.startswith("digraph Components {\n    // Legend\n")
    assert text.endswith(EXPECTED_RELATIONS)
    assert '    MissingClient [fillcolor="#d3d3d3",style="filled,dashed"];' in text
    assert '    FooService [fillcolor="#a81347",style=filled];' in text
    assert "ComponentScan" not in text.split("// Relations")[1]


def test_parse_project_walks_directory(analyzer, demo_tree) -> None:
    from_disk = analyzer.render(analyzer.parse_project(demo_tree))
    assert from_disk.endswith(EXPECTED_RELATIONS)


def test_repeated_runs_are_byte_identical(demo_tree) -> None:
    first = JavaCodeAnalyzer()
    second = JavaCodeAnalyzer()
    assert first.render(first.parse_project(demo_tree)) == second.render(second.parse_project(demo_tree))


def test_parallel_analysis_matches_sequential(demo_sources) -> None:
    sequential = JavaCodeAnalyzer()
    parallel = JavaCodeAnalyzer(AnalyzerConfigBuilder().with_max_workers(4).build())
    assert parallel.analyze_sources(demo_sources) == sequential.analyze_sources(demo_sources)
    assert parallel.render(parallel.analyze_sources(demo_sources)) == \
        sequential.render(sequential.analyze_sources(demo_sources))


def test_failing_file_is_skipped(analyzer, demo_sources, monkeypatch, caplog) -> None:
    process_source = analyzer.file_processor.process_source

    def flaky(path, content, package=""):
        if path.endswith("FooService.java"):
            raise RuntimeError("boom")
        return process_source(path, content, package)

    monkeypatch.setattr(analyzer.file_processor, "process_source", flaky)
    graph = analyzer.analyze_sources(demo_sources)
    assert "FooService" not in graph.nodes
    assert "MissingClient" not in graph.nodes
    assert "BarService" in graph.nodes
    assert "FooService.java" in caplog.text


def test_walker_skips_build_dirs_and_sorts(analyzer, tmp_path: Path) -> None:
    (tmp_path / "b").mkdir()
    (tmp_path / "a").mkdir()
    (tmp_path / "target" / "classes").mkdir(parents=True)
    (tmp_path / "b" / "Second.java").write_text("package b;\n@Service class Second {}\n", encoding="utf-8")
    (tmp_path / "a" / "First.java").write_text("package a;\n@Service class First {}\n", encoding="utf-8")
    (tmp_path / "a" / "notes.txt").write_text("@Service class Ignored {}", encoding="utf-8")
    (tmp_path / "target" / "classes" / "Generated.java").write_text("@Service class Generated {}", encoding="utf-8")

    sources = analyzer.collect_sources(tmp_path)
    assert [source.path for source in sources] == ["a/First.java", "b/Second.java"]
    assert list(analyzer.parse_project(tmp_path).nodes) == ["First", "Second"]


def test_latin1_files_are_read(analyzer, tmp_path: Path) -> None:
    (tmp_path / "Legacy.java").write_bytes("package p;\n// caf\xe9\n@Component class Legacy {}\n".encode("latin-1"))
    graph = analyzer.parse_project(tmp_path)
    assert graph.nodes["Legacy"].stereotype is Stereotype.COMPONENT


def test_single_file_root(analyzer, tmp_path: Path) -> None:
    path = tmp_path / "Only.java"
    path.write_text("package p;\n@Repository interface Only {}\n", encoding="utf-8")
    graph = analyzer.parse_project(path)
    assert graph.nodes["Only"].stereotype is Stereotype.REPOSITORY
    assert graph.nodes["Only"].package == "p"


def test_empty_directory_gives_legend_only(analyzer, tmp_path: Path) -> None:
    text = analyzer.render(analyzer.parse_project(tmp_path))
    assert text.endswith("    // Relations\n}\n")


def test_missing_root_raises(analyzer, tmp_path: Path) -> None:
    with pytest.raises(ProjectPathError):
        analyzer.parse_project(tmp_path / "nope")


def test_component_scan_coverage(demo_sources) -> None:
    analyzer = AnalyzerFactory.create_full_analyzer()
    graph = analyzer.analyze_sources(demo_sources)
    assert [(r.source, r.package) for r in graph.component_scans] == [
        ("DaoConfig", "com.example.demo.repository"),
        ("DemoApplication", "com.example.demo"),
        ("ServiceConfig", "com.example.demo.service"),
    ]
    text = analyzer.render(graph)
    assert '    "com.example.demo.service" -> BarService [label="contains"];' in text
    assert '    ServiceConfig -> "com.example.demo.service" [label="@ComponentScan"];' in text


def test_statistics(analyzer, demo_sources) -> None:
    stats = analyzer.generate_statistics(analyzer.analyze_sources(demo_sources))
    assert stats["total_nodes"] == 9
    assert stats["total_edges"] == 8
    assert stats["node_tags"] == {
        "@Configuration": 2,
        "@SpringBootApplication": 1,
        "unresolved": 3,
        "@Service": 3,
    }
    assert stats["edge_kinds"] == {"import": 2, "bean": 2, "autowired": 4}
    assert stats["unresolved"] == ["MyBean", "ConstructorInjected", "MissingClient"]
    assert stats["component_scans"] == 3
    assert stats["uncovered_components"] == []


def test_export_results(analyzer, demo_sources, tmp_path: Path) -> None:
    graph = analyzer.analyze_sources(demo_sources)
    analyzer.export_results(graph, tmp_path / "out")

    assert (tmp_path / "out" / "components.dot").read_text(encoding="utf-8") == analyzer.render(graph)
    exported = json.loads((tmp_path / "out" / "dependency_graph.json").read_text(encoding="utf-8"))
    assert [node["name"] for node in exported["nodes"]] == EXPECTED_NODES
    assert exported["edges"][0] == {
        "source": "DemoApplication", "target": "ServiceConfig", "kind": "import", "label": "@Import",
    }
    stats = json.loads((tmp_path / "out" / "statistics.json").read_text(encoding="utf-8"))
    assert stats["total_edges"] == 8


def test_export_html(analyzer, demo_sources, tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    output = tmp_path / "html" / "graph.html"
    analyzer.export_html(analyzer.analyze_sources(demo_sources), output)
    html = output.read_text(encoding="utf-8")
    assert "DemoApplication" in html
    assert "#2c9162" in html


def test_unscannable_source_is_skipped(analyzer, caplog) -> None:
    sources = [
        SourceFile(path="Bad.java", package="", text="@Service class Bad { String s = \"\udc80\"; }"),
        SourceFile(path="Good.java", package="", text="@Service class Good {}"),
    ]
    graph = analyzer.analyze_sources(sources)
    assert list(graph.nodes) == ["Good"]
    assert "Cannot scan Bad.java" in caplog.text


def test_redundant_constructor_autowired_gives_one_edge(analyzer, demo_sources) -> None:
    graph = analyzer.analyze_sources(demo_sources)
    assert [(e.target, e.label) for e in graph.outgoing("ConstructorInjection")] == [
        ("ConstructorInjected", "@Autowired (CI)"),
    ]


def test_constructor_self_injection_from_source(analyzer) -> None:
    source = SourceFile(path="Node.java", package="", text=(
        "package p;\n"
        "@Component\n"
        "public class Node {\n"
        "    @Autowired\n"
        "    Node(Node parent) {}\n"
        "}\n"
    ))
    text = analyzer.render(analyzer.analyze_sources([source]))
    assert text.endswith('    // Relations\n    "Node" -> "Node" [label="@Autowired (CI)"];\n}\n')


def test_comments_in_annotation_arguments_keep_edges(analyzer) -> None:
    source = SourceFile(path="AppConfig.java", package="", text=(
        "package p;\n"
        "@Configuration\n"
        "@Import({\n"
        "    DaoConfig.class, // persistence layer\n"
        "    SecurityConfig.class\n"
        "})\n"
        "@ComponentScan({\n"
        "    \"p.service\", // don't scan repositories here\n"
        "})\n"
        "public class AppConfig {}\n"
    ))
    graph = analyzer.analyze_sources([source])
    assert graph.nodes["AppConfig"].stereotype is Stereotype.CONFIGURATION
    assert [(e.source, e.target, e.label) for e in graph.edges] == [
        ("AppConfig", "DaoConfig", "@Import"),
        ("AppConfig", "SecurityConfig", "@Import"),
    ]
    assert [(r.source, r.package) for r in graph.component_scans] == [("AppConfig", "p.service")]


def test_repeated_import_gives_one_edge(analyzer) -> None:
    source = SourceFile(path="Cfg.java", package="", text=(
        "package p;\n"
        "@Configuration\n"
        "@Import({Other.class, Other.class})\n"
        "@Import(Other.class)\n"
        "class Cfg {}\n"
    ))
    graph = analyzer.analyze_sources([source])
    assert [(e.source, e.target) for e in graph.edges] == [("Cfg", "Other")]


def test_imported_configuration_is_not_uncovered(analyzer) -> None:
    sources = [
        SourceFile(path="App.java", package="", text=(
            "package com.app;\n"
            "@SpringBootApplication\n"
            "@Import(ExternalConfig.class)\n"
            "class App {}\n"
        )),
        SourceFile(path="ExternalConfig.java", package="", text="package org.lib;\n@Configuration\nclass ExternalConfig {}\n"),
        SourceFile(path="Stray.java", package="", text="package org.lib;\n@Service\nclass Stray {}\n"),
    ]
    stats = analyzer.generate_statistics(analyzer.analyze_sources(sources))
    assert stats["uncovered_components"] == ["Stray"]


def test_default_analyzer_and_custom_skip_dirs(tmp_path: Path) -> None:
    (tmp_path / "generated").mkdir()
    (tmp_path / "generated" / "Gen.java").write_text("package g;\n@Service class Gen {}\n", encoding="utf-8")
    (tmp_path / "Main.java").write_text("package m;\n@Service class Main {}\n", encoding="utf-8")

    default = AnalyzerFactory.create_default_analyzer()
    assert list(default.parse_project(tmp_path).nodes) == ["Main", "Gen"]
    assert [s.path for s in default.collect_sources(tmp_path)] == ["Main.java", "generated/Gen.java"]

    config = AnalyzerConfigBuilder().with_skip_dirs({"generated"}).build()
    custom = AnalyzerFactory.create_analyzer("java", config)
    assert [s.path for s in custom.collect_sources(tmp_path)] == ["Main.java"]
