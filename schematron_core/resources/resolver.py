"""
Resource Resolvers
==================

Resolvers map a bare relative path to the bytes of a schema, a schema
fragment or a preprocessor stylesheet. The compiler only depends on the
abstract ``ResourceResolver.resolve`` contract, so schemas can be served
from a directory, from memory, or from the ISO Schematron stylesheets
bundled with lxml.

Example:
    resolver = ChainResolver(
        DirectoryResolver(Path("schemas")),
        bundled_preprocessor_resolver(),
    )
    data = resolver.resolve("./record.sch")
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union
import logging
import os
import posixpath

from lxml import etree
from lxml import isoschematron

from schematron_core.exceptions import ResourceNotFoundError

logger = logging.getLogger(__name__)

CURRENT_DIR_MARKER = "./"

# Directory of the ISO Schematron XSLT 1.0 implementation shipped with lxml
BUNDLED_XSL_DIR = Path(os.path.dirname(isoschematron.__file__)) / "resources" / "xsl"


def normalize_resource_path(path: str) -> str:
    """
    Normalize a resource reference to the bare relative form resolvers use.

    Leading ``./`` markers are stripped and ``..``/``.`` segments collapsed.

    Example:
        >>> normalize_resource_path("./iso-schematron-xslt1/./iso_dsdl_include.xsl")
        'iso-schematron-xslt1/iso_dsdl_include.xsl'
    """
    if path is None:
        raise ResourceNotFoundError("", "Resource path is empty")

    href = str(path).replace("\\", "/")
    while href.startswith(CURRENT_DIR_MARKER):
        href = href[len(CURRENT_DIR_MARKER):]
        logger.debug(f"Stripped current-directory marker: {href}")

    if not href:
        raise ResourceNotFoundError(str(path), "Resource path is empty")

    normalized = posixpath.normpath(href)
    return normalized.lstrip("/") or normalized


class ResourceResolver(ABC):
    """
    Abstract resolver of resource bytes by relative path.

    Subclasses implement ``_lookup`` for already-normalized paths;
    ``resolve`` takes care of normalization and the not-found contract.
    """

    def resolve(self, path: str) -> bytes:
        """
        Return the bytes stored under ``path``.

        Raises:
            ResourceNotFoundError: If no resource exists for the path
        """
        normalized = normalize_resource_path(path)
        data = self._lookup(normalized)
        if data is None:
            raise ResourceNotFoundError(normalized)
        logger.debug(f"Resolved resource {normalized} ({len(data)} bytes)")
        return data

    def exists(self, path: str) -> bool:
        """Check whether ``path`` can be resolved."""
        try:
            return self._lookup(normalize_resource_path(path)) is not None
        except ResourceNotFoundError:
            return False

    @abstractmethod
    def _lookup(self, path: str) -> Optional[bytes]:
        """Return bytes for a normalized path, or None when absent."""
        pass


class DirectoryResolver(ResourceResolver):
    """Resolve resources from files below a root directory."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    def _lookup(self, path: str) -> Optional[bytes]:
        candidate = (self.root / path).resolve()
        if candidate != self.root and self.root not in candidate.parents:
            logger.warning(f"Refusing resource outside {self.root}: {path}")
            return None
        if not candidate.is_file():
            return None
        return candidate.read_bytes()

    def __repr__(self) -> str:
        return f"DirectoryResolver({str(self.root)!r})"


class MappingResolver(ResourceResolver):
    """Resolve resources from an in-memory mapping of path to content."""

    def __init__(self, resources: Optional[Mapping[str, Union[str, bytes]]] = None):
        self._resources: Dict[str, bytes] = {}
        for path, content in (resources or {}).items():
            self.add(path, content)

    def add(self, path: str, content: Union[str, bytes]) -> 'MappingResolver':
        """
        Register a resource.

        Returns:
            Self for method chaining
        """
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._resources[normalize_resource_path(path)] = content
        return self

    def _lookup(self, path: str) -> Optional[bytes]:
        return self._resources.get(path)

    @property
    def paths(self) -> List[str]:
        return sorted(self._resources)


class ChainResolver(ResourceResolver):
    """Try several resolvers in order and return the first hit."""

    def __init__(self, *resolvers: ResourceResolver):
        self.resolvers = list(resolvers)

    def _lookup(self, path: str) -> Optional[bytes]:
        for resolver in self.resolvers:
            data = resolver._lookup(path)
            if data is not None:
                return data
        return None


def bundled_preprocessor_resolver() -> DirectoryResolver:
    """Resolver for the ISO Schematron preprocessor stylesheets shipped with lxml."""
    return DirectoryResolver(BUNDLED_XSL_DIR)


def default_resolver(schema_dir: Optional[Union[str, Path]] = None,
                     preprocessor_dir: Optional[Union[str, Path]] = None) -> ResourceResolver:
    """
    Build the resolver used when none is injected.

    Schemas are looked up in ``schema_dir`` (current directory by default),
    preprocessors in ``preprocessor_dir`` and then in the bundled stylesheets.
    """
    resolvers: List[ResourceResolver] = [DirectoryResolver(schema_dir or Path.cwd())]
    if preprocessor_dir:
        resolvers.append(DirectoryResolver(preprocessor_dir))
    resolvers.append(bundled_preprocessor_resolver())
    return ChainResolver(*resolvers)


class LxmlResolverBridge(etree.Resolver):
    """
    Route lxml URL lookups (xsl:import, xsl:include, document()) to a
    ResourceResolver.

    Misses are recorded in ``missing`` rather than raised inside libxslt
    callbacks; the caller checks them after the lxml operation returns.
    """

    def __init__(self, resolver: ResourceResolver):
        super().__init__()
        self.resolver = resolver
        self.missing: List[str] = []

    def resolve(self, url, pubid, context):
        if url is None:
            return None
        href = url
        if href.startswith("file:"):
            href = href[len("file:"):]
            while href.startswith("//"):
                href = href[1:]
        try:
            data = self.resolver.resolve(href)
        except ResourceNotFoundError as e:
            logger.error(f"Resource lookup failed: {e}")
            self.missing.append(e.path)
            return None
        return self.resolve_string(data, context, base_url=normalize_resource_path(href))

    def make_parser(self) -> etree.XMLParser:
        """Create a parser whose URL lookups go through this bridge."""
        parser = etree.XMLParser(resolve_entities=False, no_network=True)
        parser.resolvers.add(self)
        return parser
