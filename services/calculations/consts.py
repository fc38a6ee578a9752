"""
Centralized constants for kinematic branch resolution.
"""

# Canonical quantity names per coordinate system, in resolution order
KINEMATIC_SYSTEMS = {
    "cartesian": ("px", "py", "pz", "E"),
    "polar": ("pt", "eta", "phi", "mass"),
}

# Branch field spellings accepted for each canonical quantity
FIELD_ALIASES = {
    "px": ("px",),
    "py": ("py",),
    "pz": ("pz",),
    "E": ("E", "e", "energy"),
    "pt": ("pt",),
    "eta": ("eta",),
    "phi": ("phi",),
    "mass": ("mass", "m"),
}

# Separators between collection base name and field
# "_" for flat NanoAOD-style trees, "." for dotted ATLAS-style trees
BRANCH_SEPARATORS = ("_", ".")
