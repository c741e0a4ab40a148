"""Class resolution over an ordered classpath of jars and class directories."""

from __future__ import annotations

import os
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .logging import get_logger
from .models import ClassResource

_CLASS_SUFFIX = ".class"
_JMOD_CLASSES_PREFIX = "classes/"


class ClasspathError(RuntimeError):
    """Raised when a classpath root cannot be opened or read."""


def class_resource_name(class_name: str) -> str:
    """Map ``a.b.C`` to the resource path ``a/b/C.class``."""
    return class_name.replace(".", "/") + _CLASS_SUFFIX


def list_jars(directory: Path) -> List[Path]:
    """Return every ``*.jar`` below ``directory``, recursively and in sorted order."""
    if not directory.is_dir():
        raise ClasspathError(f"Classpath root directory not found: {directory}")
    jars: List[Path] = []
    for current, dirnames, filenames in os.walk(directory):
        dirnames.sort()
        for filename in sorted(filenames):
            if filename.lower().endswith(".jar"):
                jars.append(Path(current) / filename)
    return jars


class ArchiveRoot(ABC):
    """One classpath element: a jar-style container or a directory of class files."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.uri = path.resolve().as_uri()

    @abstractmethod
    def contains(self, resource: str) -> bool:
        """Return True when ``resource`` exists below this root."""

    @abstractmethod
    def read(self, resource: str) -> bytes:
        """Return the bytes of ``resource``; I/O failures raise ``ClasspathError``."""

    @abstractmethod
    def fingerprint(self, resource: str) -> str:
        """Identity of the stored bytes used to validate cached scans."""

    def close(self) -> None:
        """Release any handle held on the underlying storage."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.uri!r})"


class JarRoot(ArchiveRoot):
    """A zip container (jar, or jmod with its ``classes/`` prefix)."""

    def __init__(self, path: Path, *, prefix: str = "") -> None:
        super().__init__(path)
        self.prefix = prefix
        self._zip: Optional[zipfile.ZipFile] = None

    def _open(self) -> zipfile.ZipFile:
        if self._zip is None:
            try:
                self._zip = zipfile.ZipFile(self.path)
            except (OSError, zipfile.BadZipFile) as exc:
                raise ClasspathError(f"Cannot open archive {self.path}: {exc}") from exc
        return self._zip

    def contains(self, resource: str) -> bool:
        try:
            self._open().getinfo(self.prefix + resource)
        except KeyError:
            return False
        return True

    def read(self, resource: str) -> bytes:
        archive = self._open()
        try:
            with archive.open(self.prefix + resource) as handle:
                return handle.read()
        except (OSError, KeyError, zipfile.BadZipFile) as exc:
            raise ClasspathError(f"Cannot read {resource} from {self.path}: {exc}") from exc

    def fingerprint(self, resource: str) -> str:
        try:
            stat = self.path.stat()
        except OSError as exc:
            raise ClasspathError(f"Cannot stat archive {self.path}: {exc}") from exc
        return f"{stat.st_size}:{stat.st_mtime_ns}"

    def close(self) -> None:
        if self._zip is not None:
            self._zip.close()
            self._zip = None


class DirectoryRoot(ArchiveRoot):
    """A directory holding loose class files in package layout."""

    def contains(self, resource: str) -> bool:
        return (self.path / resource).is_file()

    def read(self, resource: str) -> bytes:
        try:
            with (self.path / resource).open("rb") as handle:
                return handle.read()
        except OSError as exc:
            raise ClasspathError(f"Cannot read {resource} from {self.path}: {exc}") from exc

    def fingerprint(self, resource: str) -> str:
        try:
            stat = (self.path / resource).stat()
        except OSError as exc:
            raise ClasspathError(f"Cannot stat {resource} in {self.path}: {exc}") from exc
        return f"{stat.st_size}:{stat.st_mtime_ns}"


def open_root(path: Path) -> ArchiveRoot:
    """Return the classpath root for ``path``; missing paths are an error."""
    if path.is_dir():
        return DirectoryRoot(path)
    if path.is_file():
        return JarRoot(path)
    raise ClasspathError(f"Classpath element not found: {path}")


class RuntimeImage:
    """Bootstrap classes of a JDK installation; they resolve without an archive."""

    def __init__(self, roots: Sequence[ArchiveRoot], home: Path | None = None) -> None:
        self.roots = list(roots)
        self.home = home

    @classmethod
    def from_java_home(cls, java_home: Path) -> "RuntimeImage":
        """Locate the JDK's class containers: ``jmods/*.jmod`` or legacy ``lib/*.jar``."""
        logger = get_logger("classpath")
        jmods_dir = java_home / "jmods"
        roots: List[ArchiveRoot] = []
        if jmods_dir.is_dir():
            roots = [
                JarRoot(path, prefix=_JMOD_CLASSES_PREFIX)
                for path in sorted(jmods_dir.glob("*.jmod"))
            ]
        else:
            for lib_dir in (java_home / "jre" / "lib", java_home / "lib"):
                if lib_dir.is_dir():
                    roots = [JarRoot(path) for path in sorted(lib_dir.glob("*.jar"))]
                    break
        if not roots:
            logger.warning("No runtime class containers found under %s", java_home)
        else:
            logger.debug("Runtime image %s provides %d containers", java_home, len(roots))
        return cls(roots, home=java_home)

    def close(self) -> None:
        for root in self.roots:
            root.close()


class ClassResolver:
    """Locates class files along project roots, then system archives, then the runtime image.

    The resolver owns the open archive handles and must be closed (or used as
    a context manager) once the traversal is finished.
    """

    def __init__(
        self,
        classpath: Iterable[Path],
        *,
        system_path: Iterable[Path] = (),
        runtime: RuntimeImage | None = None,
    ) -> None:
        self.logger = get_logger("classpath")
        self.project_roots: List[ArchiveRoot] = [open_root(Path(path)) for path in classpath]
        self.system_roots: List[ArchiveRoot] = [open_root(Path(path)) for path in system_path]
        self.runtime = runtime
        self._project_uris = {root.uri for root in self.project_roots}
        self._roots_by_uri: Dict[str, ArchiveRoot] = {}
        for root in (*self.project_roots, *self.system_roots, *(runtime.roots if runtime else ())):
            self._roots_by_uri.setdefault(root.uri, root)
        self.logger.info("found %d jars", len(self.project_roots))

    def __enter__(self) -> "ClassResolver":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        for root in (*self.project_roots, *self.system_roots):
            root.close()
        if self.runtime is not None:
            self.runtime.close()

    def is_project_archive(self, archive: str | None) -> bool:
        return archive is not None and archive in self._project_uris

    def locate(self, class_name: str) -> tuple[ArchiveRoot, bool] | None:
        """Return the root holding ``class_name`` and whether it is the runtime image."""
        resource = class_resource_name(class_name)
        for root in (*self.project_roots, *self.system_roots):
            if root.contains(resource):
                return root, False
        if self.runtime is not None:
            for root in self.runtime.roots:
                if root.contains(resource):
                    return root, True
        return None

    def resolve(self, class_name: str, *, load: bool = True) -> Optional[ClassResource]:
        """Find ``class_name``; ``None`` when no root defines it.

        With ``load=False`` the payload is left empty and can be fetched later
        with :meth:`load`, so classes that will not be scanned are never read.
        """
        located = self.locate(class_name)
        if located is None:
            return None
        root, from_runtime = located
        archive = None if from_runtime else root.uri
        resource = ClassResource(
            class_name=class_name,
            resource=class_resource_name(class_name),
            payload=b"",
            archive=archive,
            system=not self.is_project_archive(archive),
            location=root.uri,
            fingerprint=None if from_runtime else root.fingerprint(class_resource_name(class_name)),
        )
        if load:
            resource.payload = self.load(resource)
        return resource

    def load(self, resource: ClassResource) -> bytes:
        """Read the class file bytes of a previously resolved resource."""
        root = self._roots_by_uri.get(resource.location)
        if root is None:
            raise ClasspathError(f"Unknown classpath location: {resource.location}")
        self.logger.info("Reading class %s from %s", resource.class_name, resource.location)
        return root.read(resource.resource)


__all__ = [
    "ArchiveRoot",
    "ClassResolver",
    "ClasspathError",
    "DirectoryRoot",
    "JarRoot",
    "RuntimeImage",
    "class_resource_name",
    "list_jars",
    "open_root",
]
