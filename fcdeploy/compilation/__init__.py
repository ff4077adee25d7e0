"""Compilation of service definitions into resource graphs."""

from fcdeploy.compilation.compiler import (
    Compiler,
    TemplateCompiler,
    compile_service,
)
from fcdeploy.errors import CompilationError

__all__ = [
    "Compiler",
    "TemplateCompiler",
    "compile_service",
    "CompilationError",
]
