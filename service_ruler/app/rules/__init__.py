"""
Rules engine package.

Rules are trees of propositions. Comparison propositions resolve operands
against a fact context into immutable Values and compare them; logical
propositions combine the boolean results of their children.

Modules of interest:
- value: Value, the typed comparison and arithmetic primitive.
- context: Context, the name -> fact mapping operands resolve against.
- operands: Variable and Literal operands.
- operators: comparison, logical and arithmetic operator nodes.
- models: Rule and EvaluationResult.
- engine: RuleEngine, which evaluates registered rules against a context.
"""

from .value import Value, ValueKind, ip_to_u32
from .context import Context
from .operands import Operand, Variable, Literal
from .models import Rule, RuleOutcome, EvaluationResult
from .engine import RuleEngine
