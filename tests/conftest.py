from pathlib import Path
from textwrap import dedent
from typing import Dict

import pytest

from spring_visualizer.analyzers.java_analyzer import JavaCodeAnalyzer
from spring_visualizer.models.domain_models import SourceFile

DEMO_SOURCES: Dict[str, str] = {
    "com/example/demo/DemoApplication.java": """
        package com.example.demo;

        import org.springframework.boot.autoconfigure.SpringBootApplication;
        import org.springframework.context.annotation.Import;

        @SpringBootApplication
        @Import(ServiceConfig.class)
        public class DemoApplication {
            public static void main(String[] args) {}
        }
    """,
    "com/example/demo/ServiceConfig.java": """
        package com.example.demo;

        @Configuration
        @Import(DaoConfig.class)
        @ComponentScan({ "com.example.demo.service" })
        public class ServiceConfig {
            @Bean
            public MyBean myBean() {
                return new MyBean();
            }
        }
    """,
    "com/example/demo/DaoConfig.java": """
        package com.example.demo;

        @Configuration
        @ComponentScan({ "com.example.demo.repository" })
        public class DaoConfig {
        }
    """,
    "com/example/demo/service/BarService.java": """
        package com.example.demo.service;

        import com.example.demo.MyBean;

        @Service
        public class BarService {
            @Autowired
            MyBean myBean;

            @Bean
            public ConstructorInjected constructorInjected(ConstructorInjected constructorInjected) {
                return new ConstructorInjected();
            }
        }
    """,
    "com/example/demo/service/ConstructorInjection.java": """
        package com.example.demo.service;

        @Service
        public class ConstructorInjection {
            @SuppressWarnings("unused")
            private final ConstructorInjected constructorInjected;

            @Autowired
            public ConstructorInjection(@Autowired ConstructorInjected constructorInjected) {
                this.constructorInjected = constructorInjected;
            }
        }
    """,
    "com/example/demo/service/FooService.java": """
        package com.example.demo.service;

        @Service
        public class FooService {
            @Autowired
            private MissingClient client;
        }
    """,
}


def source_file(path: str, text: str, package: str = "") -> SourceFile:
    return SourceFile(path=path, package=package, text=dedent(text))


@pytest.fixture
def demo_sources():
    return [source_file(path, text) for path, text in sorted(DEMO_SOURCES.items())]


@pytest.fixture
def demo_tree(tmp_path: Path) -> Path:
    for path, text in DEMO_SOURCES.items():
        target = tmp_path / "src" / "main" / "java" / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(dedent(text), encoding="utf-8")
    return tmp_path


@pytest.fixture
def analyzer() -> JavaCodeAnalyzer:
    return JavaCodeAnalyzer()
