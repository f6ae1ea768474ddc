"""
Ruler service application package.

Holds the rule-evaluation core (``rules``): values, operands, operators and
the engine that runs rules against a fact context.
"""
