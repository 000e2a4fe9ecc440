"""
Resource Resolution
===================

Resolvers map bare relative paths to resource bytes for the compiler.

Components:
- ResourceResolver: Abstract resolver contract
- DirectoryResolver: Files below a root directory
- MappingResolver: In-memory resources
- ChainResolver: First hit of several resolvers
- bundled_preprocessor_resolver: ISO Schematron stylesheets shipped with lxml
"""

from schematron_core.resources.resolver import (
    BUNDLED_XSL_DIR,
    ChainResolver,
    DirectoryResolver,
    LxmlResolverBridge,
    MappingResolver,
    ResourceResolver,
    bundled_preprocessor_resolver,
    default_resolver,
    normalize_resource_path,
)

__all__ = [
    "BUNDLED_XSL_DIR",
    "ChainResolver",
    "DirectoryResolver",
    "LxmlResolverBridge",
    "MappingResolver",
    "ResourceResolver",
    "bundled_preprocessor_resolver",
    "default_resolver",
    "normalize_resource_path",
]
