"""
Compilation: turning stack graphs into Pulumi resources.
"""

from shipyard.compilation.compiler import (
    Compiler,
    CompiledStack,
    CompilationError,
)
from shipyard.compilation.pulumi_compiler import PulumiCompiler

__all__ = [
    "Compiler",
    "CompiledStack",
    "CompilationError",
    "PulumiCompiler",
]
