"""Tests for classpath roots and class resolution."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from javadep.classpath import (
    ArchiveRoot,
    ClassResolver,
    ClasspathError,
    DirectoryRoot,
    JarRoot,
    RuntimeImage,
    class_resource_name,
    list_jars,
    open_root,
)
from tests._fixtures.classfile_builder import make_class
from tests._fixtures.classpath_builder import ClasspathBuilder


def test_class_resource_name_maps_packages_to_directories() -> None:
    assert class_resource_name("com.example.Outer$Inner") == "com/example/Outer$Inner.class"
    assert class_resource_name("Top") == "Top.class"


def test_list_jars_is_recursive_sorted_and_case_insensitive(classpath_builder: ClasspathBuilder) -> None:
    classpath_builder.jar("lib/b.jar", {})
    classpath_builder.jar("lib/a.JAR", {})
    classpath_builder.jar("lib/nested/c.jar", {})
    (classpath_builder.root / "lib" / "notes.txt").write_text("skip me")

    jars = list_jars(classpath_builder.root / "lib")

    assert [path.relative_to(classpath_builder.root / "lib").as_posix() for path in jars] == [
        "a.JAR",
        "b.jar",
        "nested/c.jar",
    ]


def test_list_jars_rejects_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(ClasspathError, match="not found"):
        list_jars(tmp_path / "missing")


def test_open_root_picks_container_kind(classpath_builder: ClasspathBuilder) -> None:
    jar = classpath_builder.jar("app.jar", {})
    directory = classpath_builder.directory("classes", {})

    assert isinstance(open_root(jar), JarRoot)
    assert isinstance(open_root(directory), DirectoryRoot)
    with pytest.raises(ClasspathError, match="not found"):
        open_root(classpath_builder.root / "ghost.jar")


def test_jar_root_reads_entries_and_reports_uri(classpath_builder: ClasspathBuilder) -> None:
    payload = make_class("demo.App")
    jar = classpath_builder.jar("app.jar", {"demo.App": payload})
    root = JarRoot(jar)

    try:
        assert root.uri == jar.resolve().as_uri()
        assert root.contains("demo/App.class")
        assert not root.contains("demo/Missing.class")
        assert root.read("demo/App.class") == payload
        with pytest.raises(ClasspathError):
            root.read("demo/Missing.class")
    finally:
        root.close()


def test_corrupt_jar_raises_classpath_error(classpath_builder: ClasspathBuilder) -> None:
    broken = classpath_builder.root / "broken.jar"
    broken.write_bytes(b"this is not a zip")
    root = JarRoot(broken)

    with pytest.raises(ClasspathError, match="Cannot open"):
        root.contains("demo/App.class")


def test_resolver_prefers_first_root_in_order(classpath_builder: ClasspathBuilder) -> None:
    first = classpath_builder.jar("first.jar", {"demo.Shared": make_class("demo.Shared")})
    second = classpath_builder.jar("second.jar", {"demo.Shared": make_class("demo.Shared")})

    with ClassResolver([first, second]) as resolver:
        resource = resolver.resolve("demo.Shared")

    assert resource is not None
    assert resource.archive == first.resolve().as_uri()
    assert resource.system is False
    assert resource.resource == "demo/Shared.class"
    assert resource.fingerprint


def test_resolver_reads_from_class_directories(classpath_builder: ClasspathBuilder) -> None:
    payload = make_class("demo.Loose")
    directory = classpath_builder.directory("classes", {"demo.Loose": payload})

    with ClassResolver([directory]) as resolver:
        resource = resolver.resolve("demo.Loose")

    assert resource is not None
    assert resource.payload == payload
    assert resource.archive == directory.resolve().as_uri()


def test_resolver_defers_reading_until_load(classpath_builder: ClasspathBuilder) -> None:
    payload = make_class("demo.Lazy")
    jar = classpath_builder.jar("lazy.jar", {"demo.Lazy": payload})

    with ClassResolver([jar]) as resolver:
        resource = resolver.resolve("demo.Lazy", load=False)
        assert resource is not None
        assert resource.payload == b""
        assert resolver.load(resource) == payload


def test_resolver_marks_system_archives(classpath_builder: ClasspathBuilder) -> None:
    project = classpath_builder.jar("project.jar", {"demo.App": make_class("demo.App")})
    system = classpath_builder.jar("system.jar", {"lib.Util": make_class("lib.Util")})

    with ClassResolver([project], system_path=[system]) as resolver:
        app = resolver.resolve("demo.App")
        util = resolver.resolve("lib.Util")

    assert app is not None and app.system is False
    assert util is not None and util.system is True
    assert util.archive == system.resolve().as_uri()


def test_resolver_returns_none_for_unknown_class(classpath_builder: ClasspathBuilder) -> None:
    jar = classpath_builder.jar("app.jar", {})

    with ClassResolver([jar]) as resolver:
        assert resolver.resolve("demo.Nowhere") is None


def test_resolver_rejects_missing_elements(tmp_path: Path) -> None:
    with pytest.raises(ClasspathError):
        ClassResolver([tmp_path / "missing.jar"])


def test_resolver_logs_number_of_project_roots(classpath_builder: ClasspathBuilder, caplog) -> None:
    jars = [classpath_builder.jar(f"lib{index}.jar", {}) for index in range(3)]

    with caplog.at_level(logging.INFO, logger="javadep"):
        with ClassResolver(jars):
            pass

    assert "found 3 jars" in caplog.text


def test_close_releases_archive_handles(classpath_builder: ClasspathBuilder) -> None:
    jar = classpath_builder.jar("app.jar", {"demo.App": make_class("demo.App")})
    resolver = ClassResolver([jar])
    resolver.resolve("demo.App")
    root = resolver.project_roots[0]
    assert isinstance(root, JarRoot)

    resolver.close()

    assert root._zip is None


def test_runtime_image_from_jmods(classpath_builder: ClasspathBuilder) -> None:
    object_class = make_class("java.lang.Object")
    home = classpath_builder.java_home(
        "jdk", {"java.base": {"java.lang.Object": object_class, "java.lang.String": make_class("java.lang.String")}}
    )
    runtime = RuntimeImage.from_java_home(home)

    with ClassResolver([], runtime=runtime) as resolver:
        resource = resolver.resolve("java.lang.Object")

    assert resource is not None
    assert resource.archive is None
    assert resource.system is True
    assert resource.payload == object_class
    assert resource.fingerprint is None


def test_runtime_image_falls_back_to_lib_jars(classpath_builder: ClasspathBuilder) -> None:
    classpath_builder.jar("jre8/jre/lib/rt.jar", {"java.lang.Object": make_class("java.lang.Object")})

    runtime = RuntimeImage.from_java_home(classpath_builder.root / "jre8")

    assert [root.path.name for root in runtime.roots] == ["rt.jar"]
    runtime.close()


def test_runtime_image_warns_when_empty(tmp_path: Path, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="javadep"):
        runtime = RuntimeImage.from_java_home(tmp_path)

    assert runtime.roots == []
    assert "No runtime class containers" in caplog.text


def test_project_roots_shadow_runtime_image(classpath_builder: ClasspathBuilder) -> None:
    home = classpath_builder.java_home("jdk", {"java.base": {"java.lang.Thing": make_class("java.lang.Thing")}})
    jar = classpath_builder.jar("override.jar", {"java.lang.Thing": make_class("java.lang.Thing")})

    with ClassResolver([jar], runtime=RuntimeImage.from_java_home(home)) as resolver:
        resource = resolver.resolve("java.lang.Thing")

    assert resource is not None
    assert resource.archive == jar.resolve().as_uri()


def test_archive_root_requires_complete_implementation(tmp_path: Path) -> None:
    class PartialRoot(ArchiveRoot):
        def contains(self, resource: str) -> bool:
            return False

    with pytest.raises(TypeError):
        PartialRoot(tmp_path)


def test_jar_root_lookup_honours_prefix(classpath_builder: ClasspathBuilder) -> None:
    home = classpath_builder.java_home("jdk", {"java.base": {"java.lang.Object": make_class("java.lang.Object")}})
    root = JarRoot(home / "jmods" / "java.base.jmod", prefix="classes/")

    try:
        assert root.contains("java/lang/Object.class")
        assert not root.contains("classes/java/lang/Object.class")
    finally:
        root.close()
