"""Lower SysY syntax trees to text-form Koopa IR and check its basic blocks."""

__version__ = "0.1.0"

__all__ = [
    "ast",
    "checkir",
    "evaluate",
    "genir",
    "irbase",
    "irdecl",
    "irexpr",
    "prune",
    "symtable",
    "whilestack",
]