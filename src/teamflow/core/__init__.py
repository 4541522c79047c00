"""Core primitives shared by every layer: results, errors, ids, config, ports."""
