"""Hoists inline JSX callback arrows and rewrites `.bind` calls for reflective-bind.

Sources are parsed with esprima, which reads ES2017 with JSX but no Flow or
TypeScript syntax: such files fail with `ParseError`. Trees built elsewhere
may still carry type annotations and type-only statements. The analysis
skips those, so a name used only in a type is never captured.
"""

# Public API re-exports
from reflective_bind.analysis import AnalysisState as AnalysisState
from reflective_bind.analysis import analyze_closure as analyze_closure
from reflective_bind.codegen import emit as emit
from reflective_bind.config import StaleRenderPolicy as StaleRenderPolicy
from reflective_bind.config import TransformOptions as TransformOptions

# Errors
from reflective_bind.errors import ConfigError as ConfigError
from reflective_bind.errors import ParseError as ParseError
from reflective_bind.errors import ReflectiveBindError as ReflectiveBindError
from reflective_bind.errors import StalePathError as StalePathError
from reflective_bind.errors import StructuralInvariantError as StructuralInvariantError

# Tree model
from reflective_bind.ordering import is_definitely_before as is_definitely_before
from reflective_bind.parser import parse as parse
from reflective_bind.paths import NodePath as NodePath
from reflective_bind.scope import Binding as Binding
from reflective_bind.scope import Scope as Scope
from reflective_bind.scope import UnitIndex as UnitIndex
from reflective_bind.scope import crawl as crawl

# Driver
from reflective_bind.transform import SourceResult as SourceResult
from reflective_bind.transform import TransformResult as TransformResult
from reflective_bind.transform import transform as transform
from reflective_bind.transform import transform_source as transform_source
