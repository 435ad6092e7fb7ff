"""Formal decode invariants.

This file documents what each stage MUST produce. Use it as a reviewer
anchor and system reference.
"""

DECODE_INVARIANTS = {
    "scan": [
        "Buffer starts with the 'GRIB' marker and declares edition 2",
        "Section table maps section number to its last occurrence",
        "Loop is bounded by scanner.max_sections and the buffer end",
    ],

    "grid": [
        "Always yields a geometry; malformed input yields the default grid",
        "Coordinates are micro-degree integers",
    ],

    "representation": [
        "Templates 0 (simple) and 41 (PNG) yield scaled packing",
        "Any other template yields degraded packing with 16 bits",
    ],

    "values": [
        "Length equals nx * ny exactly",
        "Missing slots are NaN; sentinels never decode to a number",
        "Kept values lie within the plausibility bound, rounded",
    ],

    "validity": [
        "Valid fraction above validity.min_valid_fraction, else LowValidity",
    ],

    "sampling": [
        "Row-major traversal at the configured stride",
        "Longitudes normalized to [-180, 180)",
        "Values strictly above sampler.min_value",
    ],
}

# Which stages may degrade instead of failing
STAGE_POLICY = {
    "scan": "STRICT",
    "grid": "DEFAULTED",
    "representation": "DEFAULTED",
    "values": "STRICT",
    "validity": "STRICT",
    "sampling": "STRICT",
}
